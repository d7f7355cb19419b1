from __future__ import annotations

import json
from decimal import Decimal
from typing import Any, Dict, Optional

import boto3
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.exceptions import BotoCoreError, ClientError

from tcm_lookup.config import Settings
from tcm_lookup.services.exceptions import ItemExistsError, RepoError
from .base import ItemRepo


def replace_decimals(obj: Any) -> Any:
    """DynamoDB numbers come back as Decimal; hand callers plain int/float."""
    if isinstance(obj, list):
        return [replace_decimals(x) for x in obj]
    if isinstance(obj, dict):
        return {k: replace_decimals(v) for k, v in obj.items()}
    if isinstance(obj, Decimal):
        return float(obj) if obj % 1 != 0 else int(obj)
    return obj


def _to_dynamo_numbers(obj: Dict[str, Any]) -> Dict[str, Any]:
    # The serializer rejects float; round-trip through JSON to turn floats into Decimal.
    return json.loads(json.dumps(obj), parse_float=Decimal)


class DynamoItemRepo(ItemRepo):
    """Items table with a NameLowercase global secondary index."""

    def __init__(self, settings: Settings, client: Any = None):
        if not settings.table_name:
            raise RepoError("TABLE_NAME is not configured")
        try:
            self._client = client or boto3.client("dynamodb", region_name=settings.aws_region)
        except (BotoCoreError, ClientError) as e:
            raise RepoError(f"Could not initialize DynamoDB client: {e}") from e
        self._table = settings.table_name
        self._index = settings.name_index
        self._ser = TypeSerializer()
        self._deser = TypeDeserializer()

    def find_by_name(self, name_lowercase: str) -> Optional[Dict[str, Any]]:
        try:
            resp = self._client.query(
                TableName=self._table,
                IndexName=self._index,
                KeyConditionExpression="#nameLowercase = :name",
                ExpressionAttributeNames={"#nameLowercase": "NameLowercase"},
                ExpressionAttributeValues={":name": self._ser.serialize(name_lowercase)},
            )
        except (BotoCoreError, ClientError) as e:
            raise RepoError(f"DynamoDB query failed for {name_lowercase!r}: {e}") from e
        items = resp.get("Items") or []
        if not items:
            return None
        return replace_decimals({k: self._deser.deserialize(v) for k, v in items[0].items()})

    def insert(self, record: Dict[str, Any]) -> None:
        try:
            item = {k: self._ser.serialize(v) for k, v in _to_dynamo_numbers(record).items()}
            self._client.put_item(
                TableName=self._table,
                Item=item,
                ConditionExpression="attribute_not_exists(ItemID)",
            )
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                raise ItemExistsError(f"Item {record.get('ItemID')} already exists") from e
            raise RepoError(f"DynamoDB put_item failed: {e}") from e
        except (BotoCoreError, TypeError, ValueError) as e:
            raise RepoError(f"DynamoDB put_item failed: {e}") from e
