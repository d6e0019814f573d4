from typing import Any, Dict, List, Optional
import logging

import requests

from config import GRAPHQL_ENDPOINT, REQUEST_TIMEOUT
from models import FetchFailure, PersonRecord, SchemaFormat

logger = logging.getLogger(__name__)

GET_USERS = """
query GetUsers($results: Int!, $nat: String!) {
    users(results: $results, nat: $nat) {
        gender
        name {
            first
            last
        }
        dob {
            date
            age
        }
        location {
            state
        }
    }
}
"""


def parse_users(
    body: Dict[str, Any], schema_format: SchemaFormat = SchemaFormat.GRAPHQL
) -> List[PersonRecord]:
    """Turn a GraphQL response body into PersonRecords, or raise FetchFailure."""
    if not isinstance(body, dict):
        raise FetchFailure(f"Unexpected response body: {type(body).__name__}")
    if body.get("errors"):
        raise FetchFailure(f"GraphQL errors: {body['errors']}")
    users = (body.get("data") or {}).get("users")
    if not isinstance(users, list):
        raise FetchFailure("Response did not contain a list of users")

    try:
        return [PersonRecord.from_payload(user, schema_format) for user in users]
    except (KeyError, TypeError) as e:
        raise FetchFailure(f"Malformed user in response: {e}") from e


class RandomUserClient:
    """Record source backed by the random user GraphQL service."""

    def __init__(
        self,
        endpoint: str = GRAPHQL_ENDPOINT,
        timeout: float = REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.endpoint = endpoint
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self, count: int, region: str) -> List[PersonRecord]:
        logger.info(f"Requesting users: results={count} nat={region}")
        payload = {"query": GET_USERS, "variables": {"results": count, "nat": region}}
        try:
            response = self.session.post(
                self.endpoint, json=payload, timeout=self.timeout
            )
            response.raise_for_status()
            body = response.json()
        except requests.RequestException as e:
            raise FetchFailure(f"Request to {self.endpoint} failed: {e}") from e
        except ValueError as e:
            raise FetchFailure(f"Response from {self.endpoint} was not JSON") from e

        records = parse_users(body)
        logger.info(f"Request complete: users fetched={len(records)}")
        return records

    def close(self):
        self.session.close()
