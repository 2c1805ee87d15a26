"""
Tests for the render_skype_export command line entry point.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from chat import ExportLoadError
from message_processing.commands import main, resolve_export_path

EXPORT = {
    "userId": "8:me",
    "exportDate": "2021-03-06T12:00:00.000Z",
    "conversations": [
        {
            "id": "8:bob",
            "displayName": "Bob",
            "MessageList": [
                {
                    "id": "m2",
                    "from": "8:me",
                    "originalarrivaltime": "2021-03-05T10:01:00.000Z",
                    "messagetype": "RichText",
                    "content": "see you <b>soon</b>",
                },
                {
                    "id": "m1",
                    "from": "8:bob",
                    "displayName": "Bob",
                    "originalarrivaltime": "2021-03-05T10:00:00.000Z",
                    "messagetype": "RichText",
                    "content": "dinner?",
                },
            ],
        },
        {
            "id": "19:team@thread.skype",
            "displayName": "Team",
            "MessageList": [
                {
                    "id": "t1",
                    "from": "8:me",
                    "originalarrivaltime": "2021-03-04T09:00:00.000Z",
                    "messagetype": "ThreadActivity/AddMember",
                    "content": "<addmember><target>8:carol</target></addmember>",
                }
            ],
        },
    ],
}


@pytest.fixture
def export_path(tmp_path: Path) -> Path:
    folder = tmp_path / "export"
    folder.mkdir()
    path = folder / "messages.json"
    path.write_text(json.dumps(EXPORT), encoding="utf-8")
    return path


def test_main_writes_rendered_document(export_path: Path, tmp_path: Path) -> None:
    """Messages keep export order while dates and blocks read oldest first."""

    output = tmp_path / "out" / "rendered.json"

    assert main(["--input", str(export_path.parent), "--output", str(output)]) == 0

    document = json.loads(output.read_text(encoding="utf-8"))
    assert document["meta"]["user_id"] == "8:me"
    assert document["meta"]["conversation_count"] == 2

    bob = document["conversations"][0]
    assert bob["id"] == "8:bob"
    assert [m["id"] for m in bob["messages"]] == ["m2", "m1"]
    assert bob["messages"][0]["content"] == "see you <strong>soon</strong>"
    assert bob["messages"][0]["is_owner"] is True
    assert bob["messages"][1]["kind"] == "text"
    assert bob["dates"] == [{"date": "5 March 2021", "message_ids": ["m1", "m2"]}]
    assert bob["blocks"] == [["m1"], ["m2"]]

    team = document["conversations"][1]
    assert team["messages"][0]["kind"] == "system"
    assert team["messages"][0]["content"] == "Added carol to the conversation"


def test_main_query_filters_and_highlights(
    export_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """--query keeps matching messages and adds highlighted content."""

    assert main(["-i", str(export_path), "-c", "bob", "-q", "dinner"]) == 0

    document = json.loads(capsys.readouterr().out)
    (conversation,) = document["conversations"]
    assert [m["id"] for m in conversation["messages"]] == ["m1"]
    assert "<mark" in conversation["messages"][0]["highlighted_content"]
    assert conversation["message_count"] == 1
    assert conversation["record_count"] == 2


def test_main_swap_roles_flips_ownership(
    export_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """--swap-roles renders the counterpart's view."""

    assert main(["-i", str(export_path), "-c", "8:bob", "--swap-roles"]) == 0

    document = json.loads(capsys.readouterr().out)
    owners = [m["is_owner"] for m in document["conversations"][0]["messages"]]
    assert owners == [False, True]


def test_main_lists_conversations(
    export_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """--list prints id, name, record count and preview per conversation."""

    assert main(["-i", str(export_path), "--list"]) == 0

    lines = capsys.readouterr().out.splitlines()
    assert lines == [
        "8:bob\tBob\t2\tdinner?",
        "19:team@thread.skype\tTeam\t1\tAdded carol to the conversation",
    ]


def test_main_reports_missing_export(tmp_path: Path) -> None:
    """A missing export exits with status 1."""

    assert main(["-i", str(tmp_path / "missing")]) == 1


def test_main_reports_unknown_conversation(export_path: Path) -> None:
    """An unmatched --conversation exits with status 1."""

    assert main(["-i", str(export_path), "-c", "nobody"]) == 1


def test_resolve_export_path_requires_messages_json(tmp_path: Path) -> None:
    """Folders without messages.json are rejected."""

    with pytest.raises(ExportLoadError):
        resolve_export_path(tmp_path)


def test_main_reports_resolved_media(tmp_path: Path) -> None:
    """Media shares found in the media folder carry their asset paths."""

    folder = tmp_path / "export"
    media = folder / "media"
    media.mkdir(parents=True)
    (media / "0-abc-1.json").write_text('{"filename": "photo.jpg"}', encoding="utf-8")
    (media / "0-abc-1.1.jpeg").write_bytes(b"\x00")
    share = (
        '<URIObject type="Picture.1" '
        'uri="https://api.asm.skype.com/v1/objects/0-abc-1">'
        '<OriginalName v="photo.jpg"/></URIObject>'
    )
    export = {
        "userId": "8:me",
        "conversations": [
            {
                "id": "8:bob",
                "MessageList": [
                    {
                        "id": "p1",
                        "from": "8:bob",
                        "originalarrivaltime": "2021-03-05T10:00:00.000Z",
                        "messagetype": "RichText/UriObject",
                        "content": share,
                    }
                ],
            }
        ],
    }
    (folder / "messages.json").write_text(json.dumps(export), encoding="utf-8")
    output = tmp_path / "rendered.json"

    assert main(["-i", str(folder), "-o", str(output)]) == 0

    (message,) = json.loads(output.read_text(encoding="utf-8"))["conversations"][0][
        "messages"
    ]
    assert message["kind"] == "media"
    assert message["media"]["type"] == "image"
    assert message["media"]["filename"] == "photo.jpg"
    assert message["media"]["path"] == str(media / "0-abc-1.1.jpeg")
    assert message["media"]["thumbnail"] is None
