"""MCP server tests using the FastMCP in-process client."""

import json

import pytest
from mcp.shared.memory import create_connected_server_and_client_session
from pydantic import AnyUrl

from random_tables.mcp_server import create_server

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _payload(result) -> dict:
    assert not result.isError, result.content[0].text
    return json.loads(result.content[0].text)


async def _call(server, name: str, arguments: dict | None = None):
    async with create_connected_server_and_client_session(server._mcp_server) as client:
        return await client.call_tool(name, arguments or {})


async def _read(server, uri: str):
    async with create_connected_server_and_client_session(server._mcp_server) as client:
        result = await client.read_resource(AnyUrl(uri))
    return json.loads(result.contents[0].text)


async def _tool_names(server) -> set[str]:
    async with create_connected_server_and_client_session(server._mcp_server) as client:
        return {tool.name for tool in (await client.list_tools()).tools}


@pytest.fixture
def server(services, colors):
    return create_server(services)


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_tool_list(services):
    names = await _tool_names(create_server(services))
    assert {
        "create_table", "list_tables", "update_table", "roll_on_table", "get_table",
        "create_template", "get_template", "list_templates", "update_template",
        "delete_template", "evaluate_template",
    } <= names


@pytest.mark.asyncio
async def test_get_table_tool_hidden_when_resources_enabled(services):
    names = await _tool_names(create_server(services, can_use_resource=True))
    assert "get_table" not in names


@pytest.mark.asyncio
async def test_create_table(services):
    server = create_server(services)
    data = _payload(await _call(server, "create_table", {
        "name": "Weather",
        "description": "d20 weather",
        "entries": [
            {"content": "Clear", "range": {"min": 1, "max": 10}},
            {"content": "Storm", "weight": 2, "range": {"min": 11, "max": 20}},
        ],
    }))
    assert data == {"table_id": "weather"}
    table = services.tables.get_table("weather")
    assert [e.content for e in table.entries] == ["Clear", "Storm"]
    assert table.entries[1].weight == 2


@pytest.mark.asyncio
async def test_create_table_rejects_bad_weight(services):
    result = await _call(create_server(services), "create_table", {
        "name": "Bad", "entries": [{"content": "x", "weight": 0}],
    })
    assert result.isError
    assert services.tables.list_tables() == []


@pytest.mark.asyncio
async def test_list_tables(server):
    data = _payload(await _call(server, "list_tables"))
    assert data["tables"] == [
        {"id": "colors", "name": "Colors", "description": "Five colors", "entry_count": 5}
    ]
    data = _payload(await _call(server, "list_tables", {"filter": {"name": "Nope"}}))
    assert data["tables"] == []


@pytest.mark.asyncio
async def test_get_table(server):
    data = _payload(await _call(server, "get_table", {"table_id": "colors"}))
    assert data["table"]["name"] == "Colors"
    assert len(data["table"]["entries"]) == 5


@pytest.mark.asyncio
async def test_get_missing_table_is_error(server):
    result = await _call(server, "get_table", {"table_id": "nope"})
    assert result.isError
    assert "nope" in result.content[0].text


@pytest.mark.asyncio
async def test_update_table(server, services):
    data = _payload(await _call(server, "update_table", {
        "table_id": "colors",
        "name": "Colours",
        "add": [{"id": "black", "content": "Black"}],
        "update": [{"id": "red", "content": "Crimson"}],
        "remove": ["purple"],
    }))
    assert data["table"]["name"] == "Colours"
    contents = [e.content for e in services.tables.get_table("colors").entries]
    assert contents == ["Crimson", "Blue", "Green", "Yellow", "Black"]


@pytest.mark.asyncio
async def test_roll_on_table(server, rng):
    rng.push(0.1, 0.3, 0.5)
    data = _payload(await _call(server, "roll_on_table", {"table_id": "colors", "count": 3}))
    assert [r["content"] for r in data["results"]] == ["Red", "Blue", "Green"]
    assert all(r["table_id"] == "colors" for r in data["results"])


@pytest.mark.asyncio
async def test_roll_resolves_references(server, services, rng):
    services.tables.create_table("Animals", entries=[{"content": "A {{C::colors::Colors}} stag"}])
    rng.push(0.5, 0.7)
    data = _payload(await _call(server, "roll_on_table", {"table_id": "animals"}))
    [result] = data["results"]
    assert result["is_template"] is True
    assert result["resolved_content"] == "A Green stag"


@pytest.mark.asyncio
async def test_roll_zero_count_is_error(server, rng):
    result = await _call(server, "roll_on_table", {"table_id": "colors", "count": 0})
    assert result.isError
    assert rng.calls == 0


@pytest.mark.asyncio
async def test_table_resource(services, colors):
    server = create_server(services, can_use_resource=True)
    data = await _read(server, "table://colors")
    assert data["id"] == "colors"
    assert [e["content"] for e in data["entries"]][0] == "Red"


@pytest.mark.asyncio
async def test_tables_resource(server):
    data = await _read(server, "random-tables://tables")
    assert [t["id"] for t in data["tables"]] == ["colors"]


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_template_lifecycle(server, services):
    data = _payload(await _call(server, "create_template", {
        "name": "Favorite", "template": "My favorite color is {{Color::colors::Colors}}",
    }))
    assert data == {"template_id": "favorite"}

    data = _payload(await _call(server, "get_template", {"template_id": "favorite"}))
    assert data["template"]["name"] == "Favorite"

    data = _payload(await _call(server, "update_template", {
        "template_id": "favorite", "description": "Just one",
    }))
    assert data["template"]["description"] == "Just one"
    assert data["template"]["template"].startswith("My favorite")

    data = _payload(await _call(server, "list_templates"))
    assert [t["id"] for t in data["templates"]] == ["favorite"]

    assert _payload(await _call(server, "delete_template", {"template_id": "favorite"})) == {"ok": True}
    assert services.templates.list_templates() == []


@pytest.mark.asyncio
async def test_evaluate_template(server, services, rng):
    services.templates.create_template("Favorite", "My favorite color is {{Color::colors::Colors}}")
    rng.push(0.1, 0.9)
    data = _payload(await _call(server, "evaluate_template", {"template_id": "favorite", "count": 2}))
    assert data["results"] == [
        {
            "original_template": "My favorite color is {{Color::colors::Colors}}",
            "evaluated_template": "My favorite color is Red",
        },
        {
            "original_template": "My favorite color is {{Color::colors::Colors}}",
            "evaluated_template": "My favorite color is Purple",
        },
    ]


@pytest.mark.asyncio
async def test_evaluate_missing_template_is_error(server):
    result = await _call(server, "evaluate_template", {"template_id": "nope"})
    assert result.isError


@pytest.mark.asyncio
async def test_template_resources(server, services):
    services.templates.create_template("Greet", "Hi", "A greeting")
    data = await _read(server, "random-tables://templates")
    assert data["templates"] == [{"id": "greet", "name": "Greet", "description": "A greeting"}]
    data = await _read(server, "template://greet")
    assert data["template"] == "Hi"
