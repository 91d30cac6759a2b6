# tests/test_session.py
import pytest

from aicoder.core.committer import NO_CHANGES
from aicoder.core.errors import RequestCancelled, SessionBusyError, TransportError
from aicoder.core.models import FileStatus, Role
from aicoder.core.session import Session


@pytest.fixture
def build_session(memory_store, fake_vcs, make_client):
    def build(*replies, files=()):
        sink = []
        session = Session(client=make_client(*replies), store=memory_store, vcs=fake_vcs,
                          files=files, sink=sink.append)
        session.streamed = sink
        return session
    return build


def test_ask_streams_and_records_turn(build_session, memory_store):
    memory_store.files["a.py"] = b"print(1)\n"
    session = build_session("It prints 1.", files=["a.py"])

    reply = session.ask("what does it do?")

    assert reply == "It prints 1."
    assert "".join(session.streamed) == "It prints 1."
    sent = session.client.calls[0]["messages"]
    assert sent[0].role is Role.SYSTEM
    assert sent[-1].role is Role.USER
    assert "Request: what does it do?" in sent[-1].content
    assert "a.py\n```\nprint(1)\n```" in sent[-1].content
    history = session.conversation.messages
    assert [m.role for m in history] == [Role.USER, Role.ASSISTANT]
    assert memory_store.writes == []


def test_history_is_sent_on_next_turn(build_session):
    session = build_session("first answer", "second answer")
    session.ask("one")
    session.ask("two")

    sent = session.client.calls[1]["messages"]
    assert [m.role for m in sent] == [Role.SYSTEM, Role.USER, Role.ASSISTANT, Role.USER]
    assert sent[2].content == "first answer"


def test_file_context_is_reread_every_request(build_session, memory_store):
    memory_store.files["a.py"] = b"v1"
    session = build_session("ok", "ok", files=["a.py"])
    session.ask("look")
    memory_store.files["a.py"] = b"v2"
    session.ask("again")

    assert "v2" in session.client.calls[1]["messages"][-1].content


def test_cancellation_leaves_conversation_untouched(build_session):
    session = build_session("kept", RequestCancelled(), "after")
    session.ask("first")
    with pytest.raises(RequestCancelled):
        session.ask("aborted one")

    assert len(session.conversation) == 2
    assert not session.busy
    assert session.ask("next") == "after"
    assert len(session.conversation) == 4


def test_transport_error_leaves_conversation_untouched(build_session):
    session = build_session(TransportError("HTTP 502: bad gateway"))
    with pytest.raises(TransportError):
        session.ask("hello")
    assert len(session.conversation) == 0
    assert not session.busy


def test_second_request_while_in_flight_is_rejected(build_session):
    session = build_session("unused")
    with session._request():
        with pytest.raises(SessionBusyError):
            session.ask("concurrent")
    assert session.client.calls == []


def test_commit_scenario_creates_and_commits(build_session, memory_store, fake_vcs):
    session = build_session("update.txt\n```\nhello\n```\n", "Add update.txt")

    result = session.commit("create update.txt saying hello")

    assert result.committed
    assert memory_store.text("update.txt") == "hello"
    assert fake_vcs.staged == ["update.txt"]
    assert session.client.calls[1]["stream"] is False
    assert fake_vcs.commits[0][0].startswith("Add update.txt\n\nOriginal prompt:\ncreate update.txt")


def test_commit_with_identical_content_reports_no_changes(build_session, memory_store, fake_vcs):
    memory_store.files["a.py"] = b"print(1)"
    session = build_session("a.py\n```\nprint(1)\n```\n", files=["a.py"])

    result = session.commit("make it print 1")

    assert not result.committed
    assert result.reason == NO_CHANGES
    assert fake_vcs.calls == []
    assert len(session.client.calls) == 1


def test_commit_without_file_blocks(build_session, fake_vcs):
    session = build_session("Could you clarify which file?")
    result = session.commit("fix it")

    assert result.reason == NO_CHANGES
    assert fake_vcs.calls == []
    assert len(session.conversation) == 2


def test_commit_buffered_mode_does_not_stream(build_session):
    session = build_session("a.py\n```\nx\n```\n", "Msg")
    session.commit("req", stream=False)
    assert session.streamed == []
    assert session.client.calls[0]["stream"] is False


def test_question_has_no_file_context(build_session, memory_store):
    memory_store.files["a.py"] = b"secret"
    session = build_session("answer", files=["a.py"])
    session.question("what is a closure?")

    content = session.client.calls[0]["messages"][-1].content
    assert content == "I have a question: what is a closure?"


def test_add_and_drop_files(build_session, memory_store):
    memory_store.files["exists.py"] = b""
    session = build_session()

    assert session.add_files(["exists.py", "new.py", "exists.py"]) == ["exists.py", "new.py"]
    assert session.active_files.paths == ["exists.py", "new.py"]
    assert session.active_files.status("new.py") is FileStatus.NEW
    assert session.drop_files(["exists.py", "nope.py"]) == ["exists.py"]
    assert session.active_files.paths == ["new.py"]


def test_missing_context_file_is_sent_as_new(build_session):
    session = build_session("ok", files=["later.py"])
    session.ask("create it")
    assert "later.py (new file)\n```\n```" in session.client.calls[0]["messages"][-1].content


def test_unreadable_context_file_is_skipped(build_session, memory_store):
    memory_store.files["ok.py"] = b"fine"
    memory_store.files["locked.py"] = b"x"
    memory_store.unreadable.add("locked.py")
    session = build_session("ok", files=["locked.py", "ok.py"])

    session.ask("go")

    content = session.client.calls[0]["messages"][-1].content
    assert "locked.py" not in content
    assert "ok.py\n```\nfine\n```" in content


def test_clear_history(build_session):
    session = build_session("a")
    session.ask("q")
    session.clear_history()
    assert len(session.conversation) == 0
