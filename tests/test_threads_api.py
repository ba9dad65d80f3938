"""Thread and message endpoints, including full chat turns."""
import json
import time
from uuid import UUID, uuid4

import httpx

from models import Message, SearchHistory


def create_thread(client, **body):
    response = client.post("/threads", json=body or None)
    assert response.status_code == 201
    return response.json()


def test_create_thread_with_default_title(client):
    thread = create_thread(client)

    assert thread["title"] == "New Conversation"
    assert thread["id"]


def test_create_thread_with_title(client):
    assert create_thread(client, title="Benefits")["title"] == "Benefits"


def test_list_threads_most_recent_first(client):
    first = create_thread(client, title="first")
    time.sleep(0.01)
    second = create_thread(client, title="second")
    time.sleep(0.01)
    client.patch(f"/threads/{first['id']}", json={"title": "first renamed"})

    response = client.get("/threads")

    assert response.status_code == 200
    assert [t["id"] for t in response.json()] == [first["id"], second["id"]]


def test_list_threads_pagination(client):
    for i in range(3):
        create_thread(client, title=f"t{i}")

    assert len(client.get("/threads", params={"limit": 2}).json()) == 2
    assert len(client.get("/threads", params={"skip": 2}).json()) == 1


def test_get_thread(client):
    thread = create_thread(client)

    assert client.get(f"/threads/{thread['id']}").json()["id"] == thread["id"]
    assert client.get(f"/threads/{uuid4()}").status_code == 404


def test_rename_thread(client):
    thread = create_thread(client)

    response = client.patch(f"/threads/{thread['id']}", json={"title": "Travel rules"})

    assert response.status_code == 200
    assert response.json()["title"] == "Travel rules"
    assert client.patch(f"/threads/{uuid4()}", json={"title": "x"}).status_code == 404


def test_rename_rejects_empty_title(client):
    thread = create_thread(client)

    assert client.patch(f"/threads/{thread['id']}", json={"title": ""}).status_code == 422


def test_delete_thread_removes_messages_and_history(client, db_session):
    thread = create_thread(client)
    client.post(f"/threads/{thread['id']}/messages", json={"content": "vacation policy"})

    response = client.delete(f"/threads/{thread['id']}")

    assert response.status_code == 200
    assert client.get(f"/threads/{thread['id']}").status_code == 404
    assert db_session.query(Message).count() == 0
    assert db_session.query(SearchHistory).count() == 0
    assert client.delete(f"/threads/{thread['id']}").status_code == 404


def test_send_message_full_turn(client, fake_search, db_session):
    records = [
        {"id": "1", "title": "Leave Handbook", "content": "a" * 50},
        {"id": "2", "metadata_storage_name": "policy.pdf", "content": "b" * 300},
    ]
    fake_search.respond("blob-index", records)
    thread = create_thread(client)

    response = client.post(
        f"/threads/{thread['id']}/messages",
        json={"content": "  What is the vacation policy for new employees in 2025?  "},
    )

    assert response.status_code == 200
    turn = response.json()
    assert turn["total_results"] == 2
    assert turn["user_message"]["role"] == "user"
    assert turn["user_message"]["content"] == "What is the vacation policy for new employees in 2025?"
    assert turn["assistant_message"]["role"] == "assistant"
    assert "found 2" in turn["assistant_message"]["content"]
    assert "**Leave Handbook**" in turn["assistant_message"]["content"]
    assert "b" * 200 + "..." in turn["assistant_message"]["content"]
    assert turn["assistant_message"]["sources"] == records
    assert turn["thread"]["title"] == "What is the vacation policy for..."

    assert json.loads(fake_search.requests[0].content)["top"] == 3

    audit = db_session.query(SearchHistory).one()
    assert audit.query == "What is the vacation policy for new employees in 2025?"
    assert audit.results_count == 2


def test_only_first_message_sets_title(client):
    thread = create_thread(client)
    client.post(f"/threads/{thread['id']}/messages", json={"content": "sick leave"})

    client.post(f"/threads/{thread['id']}/messages", json={"content": "and what about parental leave rules"})

    assert client.get(f"/threads/{thread['id']}").json()["title"] == "sick leave"


def test_send_message_when_search_times_out(client, fake_search):
    fake_search.raise_error("blob-index", httpx.ReadTimeout("timeout"))
    thread = create_thread(client)

    response = client.post(f"/threads/{thread['id']}/messages", json={"content": "vacation policy"})

    assert response.status_code == 200
    content = response.json()["assistant_message"]["content"]
    assert content.split("\n\nErrors:\n", 1)[1].startswith("- Azure Blob Storage: timeout")


def test_send_message_when_search_body_is_not_an_object(client, fake_search):
    fake_search.responses["blob-index"] = httpx.Response(200, json=[{"content": "stray"}])
    thread = create_thread(client)

    response = client.post(f"/threads/{thread['id']}/messages", json={"content": "vacation policy"})

    assert response.status_code == 200
    body = response.json()
    assert body["total_results"] == 0
    assert body["assistant_message"]["sources"] is None
    assert "- Azure Blob Storage: Unexpected search response" in body["assistant_message"]["content"]


def test_send_message_with_provider_error(client, fake_search):
    fake_search.fail("blob-index", 503, "Service Unavailable")
    thread = create_thread(client)

    response = client.post(f"/threads/{thread['id']}/messages", json={"content": "vacation policy"})

    assert response.status_code == 200
    assistant = response.json()["assistant_message"]
    assert "did not find specific documents" in assistant["content"]
    assert "Errors:" in assistant["content"]
    assert "Service Unavailable" in assistant["content"]
    assert assistant["sources"] is None


def test_send_message_to_selected_source(client, fake_search):
    fake_search.respond("sharepoint-index", [{"metadata_spo_item_name": "Team Site.aspx", "content": "x"}])
    thread = create_thread(client)

    response = client.post(
        f"/threads/{thread['id']}/messages",
        json={"content": "team site", "source": "sharepoint"},
    )

    assert "**SharePoint (1 result(s)):**" in response.json()["assistant_message"]["content"]
    assert "**Team Site.aspx**" in response.json()["assistant_message"]["content"]
    assert [r.url.path.split("/")[2] for r in fake_search.requests] == ["sharepoint-index"]


def test_send_message_search_all(client, fake_search):
    fake_search.respond("blob-index", [{"content": "blob"}])
    fake_search.respond("sharepoint-index", [{"content": "spo"}])
    thread = create_thread(client)

    response = client.post(
        f"/threads/{thread['id']}/messages",
        json={"content": "everything", "search_all": True},
    )

    assert response.json()["total_results"] == 2
    assert len(fake_search.requests) == 2


def test_send_message_unknown_thread(client):
    response = client.post(f"/threads/{uuid4()}/messages", json={"content": "hello"})

    assert response.status_code == 404


def test_send_blank_message(client):
    thread = create_thread(client)

    assert client.post(f"/threads/{thread['id']}/messages", json={"content": "   "}).status_code == 400
    assert client.post(f"/threads/{thread['id']}/messages", json={"content": ""}).status_code == 422


def test_send_message_while_turn_in_flight(client, chat_service):
    thread = create_thread(client)
    chat_service._in_flight.add(UUID(thread["id"]))

    response = client.post(f"/threads/{thread['id']}/messages", json={"content": "hello"})

    assert response.status_code == 409


def test_list_messages_in_order(client):
    thread = create_thread(client)
    client.post(f"/threads/{thread['id']}/messages", json={"content": "first question"})
    client.post(f"/threads/{thread['id']}/messages", json={"content": "second question"})

    messages = client.get(f"/threads/{thread['id']}/messages").json()

    assert [m["role"] for m in messages] == ["user", "assistant", "user", "assistant"]
    assert messages[0]["content"] == "first question"
    assert messages[2]["content"] == "second question"
    assert client.get(f"/threads/{uuid4()}/messages").status_code == 404
