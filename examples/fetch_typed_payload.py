#!/usr/bin/env python3  # noqa: EXE001
"""
Typed Payload Demo: fetch a JSON document and decode it into a model

Shows how to:
- Build a JSONTransaction for a URL
- Reject non-2xx responses before parsing
- Coerce the JSON into a pydantic model
- Sanity-check the payload before reporting success

Run with a URL that returns a JSON object with "login" and "id" fields,
for example: python fetch_typed_payload.py https://api.github.com/users/octocat
"""  # noqa: D212, D415

import logging
import sys

from pydantic import BaseModel

from json_transactions import (
    Failed,
    JSONTransaction,
    require_success_status,
    typed_payload,
)


class User(BaseModel):
    """The fields this demo cares about"""  # noqa: D415

    login: str
    id: int
    name: str | None = None


def check_user(user: User, data: bytes, metadata) -> None:  # noqa: ANN001, ARG001
    if user.id <= 0:
        raise ValueError(f"implausible user id {user.id}")


def main(url: str) -> int:  # noqa: D103
    logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    transaction: JSONTransaction[User] = JSONTransaction(
        url,
        validate_metadata=require_success_status,
        process_payload=typed_payload(User),
        validate_payload=check_user,
    )
    result = transaction.execute_sync(timeout=60)

    if isinstance(result, Failed):
        print(f"{type(result.error).__name__}: {result.error}")  # noqa: T201
        return 1
    print(f"{result.payload.login} (#{result.payload.id}) via HTTP {result.metadata.status_code}")  # noqa: T201
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1] if len(sys.argv) > 1 else "https://api.github.com/users/octocat"))
