"""Entry point for the Data Output Agent: python -m data_output_agent"""

import asyncio
import logging
import os
import sys
import uuid

from langchain_core.messages import HumanMessage

from data_output_agent.agent import create_agent
from data_output_agent.config import ConfigurationError, from_environment
from data_output_agent.database import EventStore
from data_output_agent.output import DataOutputAgent
from data_output_agent.poller import source_urls, start_polling
from data_output_agent.tools import set_output_agent

DEFAULT_DB_PATH = "data_output_agent.db"
CHECKPOINT_DB_PATH = "data_output_agent_checkpoints.db"

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(message)s",
    datefmt="%H:%M:%S",
)
# Quiet noisy loggers
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("langchain").setLevel(logging.WARNING)

logger = logging.getLogger("data_output_agent")


async def chat_loop(agent, config: dict) -> None:
    """Run the interactive chat loop."""
    print("Data Output Agent ready! Type your message (Ctrl+C to quit).\n")

    while True:
        try:
            user_input = await asyncio.to_thread(input, "You: ")
        except EOFError:
            break

        if not user_input.strip():
            continue

        try:
            response = await asyncio.to_thread(
                agent.invoke,
                {"messages": [HumanMessage(content=user_input)]},
                config,
            )
            last_message = response["messages"][-1]
            print(f"\nAgent: {last_message.content}\n")
        except Exception as e:
            error_msg = str(e)
            if "tool_use" in error_msg and "tool_result" in error_msg:
                # Corrupted checkpoint, start a fresh thread
                config["configurable"]["thread_id"] = uuid.uuid4().hex
                print("\nAgent: Sorry, I had an issue with my memory. Let me start fresh. Please try again.\n")
            else:
                print(f"\nAgent: Sorry, I encountered an error: {error_msg}\n")


async def main() -> int:
    """Validate options, then run the chat loop and the source poller."""
    try:
        options = from_environment()
    except ConfigurationError as e:
        for error in e.errors:
            logger.error("Invalid options: %s", error)
        return 1

    store = EventStore(os.environ.get("DATA_OUTPUT_DB_PATH", DEFAULT_DB_PATH))
    store.connect()
    set_output_agent(DataOutputAgent(options, store))

    agent = create_agent(
        checkpoint_db_path=os.environ.get("DATA_OUTPUT_CHECKPOINT_PATH", CHECKPOINT_DB_PATH)
    )
    config = {"configurable": {"thread_id": uuid.uuid4().hex}}

    urls = source_urls()
    poller_task = asyncio.create_task(start_polling(store, urls)) if urls else None

    try:
        await chat_loop(agent, config)
    except KeyboardInterrupt:
        print("\nGoodbye!")
    finally:
        if poller_task:
            poller_task.cancel()
            try:
                await poller_task
            except asyncio.CancelledError:
                pass
        store.close()
    return 0


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
