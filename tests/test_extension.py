from a2ui_agent.extension import (
    A2UI_EXTENSION_URI,
    A2UI_MIME_TYPE,
    collect_requested_extensions,
    create_a2ui_part,
    get_a2ui_agent_extension,
    try_activate_a2ui_extension,
)
from a2ui_agent.models import PartKind


def test_exact_uri_activates():
    assert try_activate_a2ui_extension([A2UI_EXTENSION_URI])


def test_uri_contained_in_longer_string_activates():
    assert try_activate_a2ui_extension([f"{A2UI_EXTENSION_URI};version=1"])


def test_unrelated_extensions_do_not_activate():
    assert not try_activate_a2ui_extension(["https://example.com/ext/other"])


def test_empty_or_missing_does_not_activate():
    assert not try_activate_a2ui_extension([])
    assert not try_activate_a2ui_extension(None)
    assert not try_activate_a2ui_extension([""])


def test_agent_extension_is_optional():
    ext = get_a2ui_agent_extension()
    assert ext.uri == A2UI_EXTENSION_URI
    assert ext.required is False


def test_create_a2ui_part():
    part = create_a2ui_part({"beginRendering": {"surfaceId": "default"}})
    assert part.kind == PartKind.DATA
    assert part.data == {"beginRendering": {"surfaceId": "default"}}
    assert part.metadata == {"mimeType": A2UI_MIME_TYPE}


def test_collect_requested_extensions_merges_sources():
    result = collect_requested_extensions(
        f"{A2UI_EXTENSION_URI}, https://example.com/a",
        ["https://example.com/a", "https://example.com/b"],
        None,
        [],
    )
    assert result == [A2UI_EXTENSION_URI, "https://example.com/a", "https://example.com/b"]
