"""
Todo API client example using http_dispatch.

This example declares one descriptor per endpoint, dispatches them against
a public JSON API and matches on the error taxonomy.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List

from pydantic import BaseModel

from http_dispatch import (
    ContentType,
    Dispatcher,
    HTTPClient,
    HTTPMethod,
    NetworkError,
    NotFound,
    RequestDescriptor,
    TransportFailed,
    Unauthorized,
)

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

BASE_URL = "https://jsonplaceholder.typicode.com"


class Todo(BaseModel):
    id: int
    title: str
    completed: bool


@dataclass
class ListTodos(RequestDescriptor[List[Todo]]):
    path: str = "/todos"
    response_type: Any = List[Todo]


@dataclass
class GetTodo(RequestDescriptor[Todo]):
    response_type: Any = Todo


@dataclass
class CreateTodo(RequestDescriptor[Dict[str, Any]]):
    path: str = "/todos"
    method: HTTPMethod = HTTPMethod.POST
    content_type: ContentType = ContentType.URL_ENCODED
    response_type: Any = Dict[str, Any]


async def main() -> None:
    async with Dispatcher(HTTPClient()) as dispatcher:
        todos = await dispatcher.request(ListTodos(query_params={"userId": 1}), BASE_URL)
        logger.info(f"User 1 has {len(todos)} todos")

        created = await dispatcher.request(
            CreateTodo(body={"title": "write docs", "completed": False}),
            BASE_URL,
        )
        logger.info(f"Created: {created}")

        try:
            await dispatcher.request(GetTodo(path="/todos/999999"), BASE_URL)
        except NotFound:
            logger.info("Todo 999999 does not exist")
        except Unauthorized:
            logger.info("Re-authenticate and try again")
        except TransportFailed as e:
            logger.error(f"Network failure: {e.underlying!r}")
        except NetworkError as e:
            logger.error(f"Request failed: {e!r}")


if __name__ == "__main__":
    asyncio.run(main())
