import json

import pytest

from a2ui_agent.restaurant_data import RESTAURANT_DATA
from a2ui_agent.tools import TOOL_DEFINITIONS, execute_tool, get_restaurants


def test_new_york_returns_restaurants():
    result = json.loads(get_restaurants("Chinese", "New York, NY"))
    assert len(result) == 5
    assert result[0]["name"] == RESTAURANT_DATA[0]["name"]


def test_other_locations_return_empty_list():
    assert get_restaurants("Chinese", "San Francisco") == "[]"


def test_count_and_base_url():
    result = json.loads(get_restaurants("Chinese", "new york", count=10, base_url="https://agent.test"))
    assert len(result) == len(RESTAURANT_DATA)
    assert all(r["imageUrl"].startswith("https://agent.test/static/") for r in result)
    # Source data is left alone
    assert RESTAURANT_DATA[0]["imageUrl"].startswith("http://localhost:10002/")


def test_execute_tool_dispatch():
    result = json.loads(execute_tool("get_restaurants", {"cuisine": "Chinese", "location": "NY", "count": 0}))
    assert result == []
    assert len(json.loads(execute_tool("get_restaurants", {"cuisine": "Chinese", "location": "NY"}))) == 5


def test_execute_unknown_tool():
    with pytest.raises(ValueError, match="Unknown tool: nope"):
        execute_tool("nope", {})


def test_tool_definitions():
    names = [t["function"]["name"] for t in TOOL_DEFINITIONS]
    assert names == ["get_restaurants"]
    assert TOOL_DEFINITIONS[0]["function"]["parameters"]["required"] == ["cuisine", "location"]
