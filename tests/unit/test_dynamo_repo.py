import boto3
import pytest
from botocore.stub import Stubber

from tcm_lookup.config import Settings
from tcm_lookup.services.exceptions import ItemExistsError, RepoError
from tcm_lookup.services.repo.dynamo_repo import DynamoItemRepo, replace_decimals


@pytest.fixture
def client():
    return boto3.client(
        "dynamodb",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


@pytest.fixture
def repo(client):
    settings = Settings(openai_api_key="test", table_name="Items")
    return DynamoItemRepo(settings, client=client)


QUERY_PARAMS = {
    "TableName": "Items",
    "IndexName": "NameLowercaseIndex",
    "KeyConditionExpression": "#nameLowercase = :name",
    "ExpressionAttributeNames": {"#nameLowercase": "NameLowercase"},
    "ExpressionAttributeValues": {":name": {"S": "ginger"}},
}


def test_find_by_name_unmarshalls_first_match(client, repo):
    with Stubber(client) as stub:
        stub.add_response("query", {"Items": [
            {
                "ItemID": {"S": "a"},
                "ItemType": {"S": "ingredient"},
                "NameLowercase": {"S": "ginger"},
                "Name": {"M": {"English": {"S": "Ginger"}}},
                "NutritionalInformation": {"M": {"Calories": {"N": "80"}, "Fat": {"N": "0.75"}}},
                "FlavorProfile": {"L": [{"S": "pungent"}]},
            },
            {"ItemID": {"S": "b"}, "NameLowercase": {"S": "ginger"}},
        ]}, QUERY_PARAMS)
        item = repo.find_by_name("ginger")
        stub.assert_no_pending_responses()
    assert item["ItemID"] == "a"
    assert item["Name"] == {"English": "Ginger"}
    assert item["NutritionalInformation"] == {"Calories": 80, "Fat": 0.75}
    assert isinstance(item["NutritionalInformation"]["Calories"], int)
    assert item["FlavorProfile"] == ["pungent"]


def test_find_by_name_without_items_is_none(client, repo):
    with Stubber(client) as stub:
        stub.add_response("query", {"Items": []}, QUERY_PARAMS)
        assert repo.find_by_name("ginger") is None


def test_query_error_is_repo_error(client, repo):
    with Stubber(client) as stub:
        stub.add_client_error("query", service_error_code="ResourceNotFoundException")
        with pytest.raises(RepoError):
            repo.find_by_name("ginger")


def test_insert_writes_conditional_put(client, repo):
    record = {"ItemID": "a", "NameLowercase": "ginger", "Score": 1.5, "Count": 2, "Tags": ["x"]}
    with Stubber(client) as stub:
        stub.add_response("put_item", {}, {
            "TableName": "Items",
            "Item": {
                "ItemID": {"S": "a"},
                "NameLowercase": {"S": "ginger"},
                "Score": {"N": "1.5"},
                "Count": {"N": "2"},
                "Tags": {"L": [{"S": "x"}]},
            },
            "ConditionExpression": "attribute_not_exists(ItemID)",
        })
        repo.insert(record)
        stub.assert_no_pending_responses()
    assert record["Score"] == 1.5


def test_conditional_check_failure_is_item_exists(client, repo):
    with Stubber(client) as stub:
        stub.add_client_error("put_item", service_error_code="ConditionalCheckFailedException",
                              http_status_code=400)
        with pytest.raises(ItemExistsError):
            repo.insert({"ItemID": "a", "NameLowercase": "ginger"})


def test_other_put_errors_are_repo_errors(client, repo):
    with Stubber(client) as stub:
        stub.add_client_error("put_item", service_error_code="ProvisionedThroughputExceededException",
                              http_status_code=400)
        with pytest.raises(RepoError) as exc:
            repo.insert({"ItemID": "a", "NameLowercase": "ginger"})
    assert not isinstance(exc.value, ItemExistsError)


def test_table_name_is_required():
    settings = Settings(openai_api_key="test", store_backend="json")
    with pytest.raises(RepoError):
        DynamoItemRepo(settings, client=object())


def test_replace_decimals_nested():
    from decimal import Decimal
    assert replace_decimals({"a": [Decimal("1"), {"b": Decimal("2.5")}], "c": "x"}) == {"a": [1, {"b": 2.5}], "c": "x"}
