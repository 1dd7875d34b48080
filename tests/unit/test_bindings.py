import pytest
from conftest import version_payload

from secretflare.models.binding import Binding, BindingKind, Secret, is_secret
from secretflare.models.version import VersionDetails
from secretflare.versions.bindings import merge_bindings, secret_names


def _bindings(*raw):
    return [Binding.model_validate(b) for b in raw]


def _dump(bindings):
    return [b.model_dump() for b in bindings]


def test_replaces_secret_and_keeps_plain_text():
    bindings = _bindings(
        {"type": "plain_text", "name": "ENV", "text": "prod"},
        {"type": "secret_text", "name": "API_KEY", "text": "old"},
    )

    merged = merge_bindings(bindings, [Secret(name="API_KEY", value="new")])

    assert _dump(merged) == [
        {"type": "plain_text", "name": "ENV", "text": "prod"},
        {"type": "secret_text", "name": "API_KEY", "text": "new"},
    ]


def test_retained_bindings_keep_their_order():
    bindings = _bindings(
        {"type": "service", "name": "Z_SERVICE", "service": "other"},
        {"type": "secret_text", "name": "S1"},
        {"type": "kv_namespace", "name": "A_KV", "namespace_id": "kv1"},
        {"type": "secret_key", "name": "SIGNING_KEY"},
        {"type": "plain_text", "name": "M_VAR", "text": "1"},
    )

    merged = merge_bindings(bindings, [])

    assert [b.name for b in merged] == ["Z_SERVICE", "A_KV", "M_VAR"]


def test_secret_count_matches_input_exactly():
    bindings = _bindings(
        {"type": "secret_text", "name": "OLD_ONE"},
        {"type": "secret_text", "name": "OLD_TWO"},
        {"type": "plain_text", "name": "ENV", "text": "prod"},
    )
    secrets = [Secret(name="NEW_ONE", value="1"), Secret(name="OLD_TWO", value="2")]

    merged = merge_bindings(bindings, secrets)

    merged_secrets = [b for b in merged if b.kind == BindingKind.SECRET_TEXT]
    assert [b.name for b in merged_secrets] == ["NEW_ONE", "OLD_TWO"]
    assert "OLD_ONE" not in {b.name for b in merged}


def test_secrets_are_appended_in_caller_order():
    merged = merge_bindings(
        _bindings({"type": "plain_text", "name": "ENV", "text": "prod"}),
        [Secret(name="B", value="b"), Secret(name="A", value="a")],
    )
    assert [b.name for b in merged] == ["ENV", "B", "A"]


def test_name_collision_with_plain_binding_is_passed_through():
    merged = merge_bindings(
        _bindings({"type": "plain_text", "name": "TOKEN", "text": "public"}),
        [Secret(name="TOKEN", value="private")],
    )
    assert [(b.type, b.name) for b in merged] == [
        ("plain_text", "TOKEN"),
        ("secret_text", "TOKEN"),
    ]


def test_unknown_binding_types_survive_verbatim():
    raw = {"type": "future_thing", "name": "FUTURE", "config": {"nested": [1, 2]}}

    merged = merge_bindings(_bindings(raw), [])

    assert merged[0].kind == BindingKind.UNKNOWN
    assert merged[0].model_dump() == raw


def test_source_bindings_are_not_mutated():
    bindings = _bindings({"type": "secret_text", "name": "API_KEY"})

    merge_bindings(bindings, [Secret(name="OTHER", value="x")])

    assert _dump(bindings) == [{"type": "secret_text", "name": "API_KEY"}]


def test_secret_value_is_hidden_in_repr():
    secret = Secret(name="API_KEY", value="hunter2")
    assert "hunter2" not in repr(secret)


@pytest.mark.parametrize(
    ("kind", "expected"),
    [
        (BindingKind.SECRET_TEXT, True),
        (BindingKind.SECRET_KEY, True),
        (BindingKind.PLAIN_TEXT, False),
        (BindingKind.JSON, False),
        (BindingKind.SERVICE, False),
        (BindingKind.UNKNOWN, False),
    ],
)
def test_is_secret(kind, expected):
    assert is_secret(kind) is expected


def test_secret_names_lists_secret_bindings_in_order():
    details = VersionDetails.model_validate(
        version_payload(
            bindings=[
                {"type": "secret_text", "name": "B"},
                {"type": "plain_text", "name": "ENV", "text": "prod"},
                {"type": "secret_key", "name": "A"},
            ]
        )
    )
    assert secret_names(details) == ["B", "A"]
