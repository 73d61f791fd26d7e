"""LangGraph agent definition for the Data Output Agent."""

import sqlite3
from typing import Literal

from langchain_anthropic import ChatAnthropic
from langchain_core.messages import SystemMessage, ToolMessage
from langgraph.checkpoint.sqlite import SqliteSaver
from langgraph.graph import END, START, MessagesState, StateGraph

from data_output_agent.tools import (
    feed_status,
    list_events,
    record_event,
    render_feed,
)

SYSTEM_PROMPT = """You are the Data Output Agent, an assistant that publishes received events as an RSS or JSON feed.

You help users:
- Record new events to be published in the feed
- Look at the most recently received events
- Preview the feed as RSS (XML) or JSON, exactly as a feed reader would see it
- Check whether events are arriving as often as expected

When a user wants to add an event, use the record_event tool with the event as a JSON object.
When a user asks what was received recently, use the list_events tool.
When a user wants to see the feed, use the render_feed tool. It needs one of the configured secrets; ask for it if you do not have it.
When a user asks whether the feed is healthy or up to date, use the feed_status tool.
When the user's intent is unclear, ask a clarifying question rather than guessing.
Be concise but informative in your responses."""

# All tools available to the agent
TOOLS = [record_event, list_events, render_feed, feed_status]


def create_agent(
    checkpoint_db_path: str = "data_output_agent_checkpoints.db",
    tools: list | None = None,
):
    """Create and compile the LangGraph agent.

    Args:
        checkpoint_db_path: Path to SQLite database for LangGraph checkpointing.
        tools: List of tool functions to bind to the agent. If None, uses default TOOLS.

    Returns:
        Compiled LangGraph agent.
    """
    tools = TOOLS if tools is None else tools
    tools_by_name = {tool.name: tool for tool in tools}
    model = ChatAnthropic(model="claude-sonnet-4-5-20250929", temperature=0).bind_tools(tools)

    def agent_node(state: MessagesState):
        """LLM call node: decides whether to use a tool or respond directly."""
        messages = [SystemMessage(content=SYSTEM_PROMPT)] + state["messages"]
        response = model.invoke(messages)
        return {"messages": [response]}

    def tool_node(state: MessagesState):
        """Execute tool calls from the LLM response."""
        results = []
        last_message = state["messages"][-1]
        for tool_call in last_message.tool_calls:
            tool = tools_by_name[tool_call["name"]]
            result = tool.invoke(tool_call["args"])
            results.append(
                ToolMessage(content=str(result), tool_call_id=tool_call["id"])
            )
        return {"messages": results}

    def should_continue(state: MessagesState) -> Literal["tool_node", "__end__"]:
        """Route to tool execution or end based on LLM output."""
        last_message = state["messages"][-1]
        if last_message.tool_calls:
            return "tool_node"
        return END

    builder = StateGraph(MessagesState)
    builder.add_node("agent_node", agent_node)
    builder.add_node("tool_node", tool_node)

    builder.add_edge(START, "agent_node")
    builder.add_conditional_edges("agent_node", should_continue, ["tool_node", END])
    builder.add_edge("tool_node", "agent_node")

    checkpointer = SqliteSaver(sqlite3.connect(checkpoint_db_path, check_same_thread=False))
    return builder.compile(checkpointer=checkpointer)
