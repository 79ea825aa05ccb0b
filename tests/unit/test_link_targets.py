import pytest

from src.components.menu_tree import TargetConfig, TargetResolution, parse_target


class StubResolver:
    def __init__(self, status="resolved"):
        self.status = status
        self.seen = []

    def resolve(self, path):
        self.seen.append(path)
        if self.status != "resolved":
            return TargetResolution(status=self.status)
        return TargetResolution(status="resolved", route_name="r", route_parameters={"p": "1"})


@pytest.mark.parametrize("uri", ["<front>", "/", "internal:/"])
def test_front_sentinels(uri):
    target, errors = parse_target(uri)

    assert errors == []
    assert target.kind == "front"
    assert target.route_name == "<front>"


def test_front_keeps_query_and_fragment():
    target, _ = parse_target("<front>?a=b#frag")

    assert target.kind == "front"
    assert target.query == "a=b"
    assert target.fragment == "frag"
    assert target.uri == "<front>?a=b#frag"


def test_external_url():
    target, errors = parse_target("https://example.com/path?q=1#x")

    assert errors == []
    assert target.kind == "external"
    assert target.url == "https://example.com/path?q=1#x"
    assert target.query == "q=1"


def test_external_requires_host():
    _, errors = parse_target("https:///nohost")

    assert [e.code for e in errors] == ["invalid_target"]


def test_scheme_not_allowed():
    config = TargetConfig(allowed_external_schemes=("https",))

    _, errors = parse_target("http://example.com", config=config)

    assert [e.code for e in errors] == ["invalid_target"]


@pytest.mark.parametrize("uri", ["javascript:alert(1)", "data:text/html,hi", "ftp://x.org/f"])
def test_unsafe_or_unknown_schemes(uri):
    target, errors = parse_target(uri)

    assert target is None
    assert errors[0].message == f"The path '{uri}' is either invalid or you do not have access to it."


def test_blocked_scheme_even_if_allowed():
    config = TargetConfig(allowed_external_schemes=("javascript",))

    _, errors = parse_target("javascript://alert(1)", config=config)

    assert [e.code for e in errors] == ["invalid_target"]


def test_named_route():
    target, errors = parse_target("route:entity.node.canonical;node=5#top")

    assert errors == []
    assert target.kind == "route"
    assert target.route_name == "entity.node.canonical"
    assert target.route_parameters == {"node": "5"}
    assert target.fragment == "top"


def test_route_front():
    target, _ = parse_target("route:<front>")

    assert target.kind == "front"


@pytest.mark.parametrize("uri", ["route:", "route:name;novalue"])
def test_malformed_route(uri):
    _, errors = parse_target(uri)

    assert [e.code for e in errors] == ["invalid_target"]


def test_internal_path_resolved():
    resolver = StubResolver()

    target, errors = parse_target("internal:/node/1?x=y", resolver)

    assert errors == []
    assert resolver.seen == ["/node/1"]
    assert target.path == "/node/1"
    assert target.route_name == "r"
    assert target.query == "x=y"


def test_entity_uri_resolved_as_path():
    resolver = StubResolver()

    parse_target("entity:node/3", resolver)

    assert resolver.seen == ["/node/3"]


def test_inaccessible_path():
    _, errors = parse_target("/admin", StubResolver("inaccessible"))

    assert [e.code for e in errors] == ["inaccessible"]
    assert errors[0].message == "The path '/admin' is inaccessible."


def test_unknown_path():
    _, errors = parse_target("/nowhere", StubResolver("not_found"))

    assert [e.code for e in errors] == ["invalid_target"]


def test_unresolved_path_without_resolver():
    target, errors = parse_target("/node/9")

    assert errors == []
    assert target.kind == "route"
    assert target.path == "/node/9"
    assert target.route_name is None


@pytest.mark.parametrize("uri", ["", "   "])
def test_empty_target(uri):
    _, errors = parse_target(uri)

    assert errors[0].message == "Link target is required"


@pytest.mark.parametrize("uri", ["node/1", "?page=2", "#top"])
def test_path_without_leading_slash(uri):
    target, errors = parse_target(uri)

    assert target is None
    assert errors[0].message == f"Manually entered paths should start with a slash ('{uri}')"


def test_non_text_target():
    _, errors = parse_target(42)  # type: ignore[arg-type]

    assert errors[0].message == "Link target is required"
