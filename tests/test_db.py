from glucotrack.db import CHAT_ID_KEY, KeyValueStore, get_chat_id, set_chat_id


def test_key_value_store_upserts(tmp_path):
    kv = KeyValueStore(tmp_path / "nested" / "kv.db")

    assert kv.get("missing") is None
    assert kv.get("missing", "fallback") == "fallback"

    kv.set("greeting", "hola")
    kv.set("greeting", "hello")
    assert kv.get("greeting") == "hello"

    kv.delete("greeting")
    assert kv.get("greeting") is None


def test_values_survive_a_new_store_instance(tmp_path):
    path = tmp_path / "kv.db"
    KeyValueStore(path).set("glucose_readings", "[]")

    assert KeyValueStore(path).get("glucose_readings") == "[]"


def test_chat_id_helpers(tmp_path):
    kv = KeyValueStore(tmp_path / "kv.db")
    assert get_chat_id(kv) is None

    set_chat_id(kv, "  123456  ")
    assert get_chat_id(kv) == "123456"

    set_chat_id(kv, "")
    assert kv.get(CHAT_ID_KEY) is None

    kv.set(CHAT_ID_KEY, "   ")
    assert get_chat_id(kv) is None
