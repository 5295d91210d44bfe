from __future__ import annotations

import os
import platform
from pathlib import Path

import pytest

from browser import InMemoryBrowser
from browser.local import LocalBrowser
from oauth.errors import MissingSavedState, StorageUnavailable
from oauth.state_store import PersistentStateStore
from session import ApplicationPhase
from utils.storage import OriginStorage, origin_slug

from conftest import make_machine, mount_and_settle


def test_save_load_remove_round_trip(browser: InMemoryBrowser) -> None:
    store = PersistentStateStore(browser)
    store.save("k", "v")
    assert store.load("k") == "v"
    store.remove("k")
    assert store.load("k") is None


def test_nonce_uses_reserved_key(browser: InMemoryBrowser) -> None:
    store = PersistentStateStore(browser)
    store.save_nonce("abc")
    assert browser.storage == {"oauth_state": "abc"}
    store.clear_nonce()
    assert browser.storage == {}


def test_second_nonce_overwrites_first(browser: InMemoryBrowser) -> None:
    store = PersistentStateStore(browser)
    store.save_nonce("first")
    store.save_nonce("second")
    assert store.load_nonce() == "second"


def test_storage_failures_are_swallowed(browser: InMemoryBrowser) -> None:
    browser.storage_available = False
    store = PersistentStateStore(browser)

    store.save_nonce("abc")
    assert store.load_nonce() is None
    store.clear_nonce()


def test_in_memory_browser_raises_when_disabled(browser: InMemoryBrowser) -> None:
    browser.storage_available = False
    with pytest.raises(StorageUnavailable):
        browser.get_item("oauth_state")


# ---- file-backed origin storage ----


def test_origin_slug() -> None:
    assert origin_slug("http://localhost:8080") == "http_localhost_8080"
    assert origin_slug("https://geeom.github.io") == "https_geeom_github_io"


def test_origin_storage_persists_between_instances(tmp_path) -> None:
    OriginStorage("http://localhost:8080", str(tmp_path)).set_item("oauth_state", "n1")
    reopened = OriginStorage("http://localhost:8080", str(tmp_path))
    assert reopened.get_item("oauth_state") == "n1"


def test_origin_storage_is_scoped_by_origin(tmp_path) -> None:
    OriginStorage("http://localhost:8080", str(tmp_path)).set_item("oauth_state", "n1")
    other = OriginStorage("https://geeom.github.io", str(tmp_path))
    assert other.get_item("oauth_state") is None


@pytest.mark.skipif(platform.system() == "Windows", reason="POSIX permissions")
def test_origin_storage_file_is_owner_only(tmp_path) -> None:
    storage = OriginStorage("http://localhost:8080", str(tmp_path))
    storage.set_item("oauth_state", "n1")
    assert os.stat(storage.storage_path).st_mode & 0o777 == 0o600


def test_corrupt_storage_file_reads_as_absent(tmp_path) -> None:
    browser = LocalBrowser("http://localhost:8080", "http://localhost:8080/", str(tmp_path), open_browser=False)
    browser.storage.storage_path.parent.mkdir(parents=True)
    browser.storage.storage_path.write_text("{not json")

    with pytest.raises(StorageUnavailable):
        browser.get_item("oauth_state")
    assert PersistentStateStore(browser).load_nonce() is None


@pytest.mark.parametrize("raw", [b"\xff", b'{"oauth_state": "\xff\xfe"}'])
def test_undecodable_storage_file_reads_as_absent(tmp_path, raw: bytes) -> None:
    browser = LocalBrowser("http://localhost:8080", "http://localhost:8080/", str(tmp_path), open_browser=False)
    browser.storage.storage_path.parent.mkdir(parents=True)
    browser.storage.storage_path.write_bytes(raw)

    with pytest.raises(StorageUnavailable):
        browser.get_item("oauth_state")
    assert PersistentStateStore(browser).load_nonce() is None


def test_undecodable_storage_file_rejects_callback(tmp_path, ok_backend) -> None:
    browser = LocalBrowser("http://localhost:8080", "http://localhost:8080/", str(tmp_path), open_browser=False)
    browser.storage.storage_path.parent.mkdir(parents=True)
    browser.storage.storage_path.write_bytes(b"\xff")
    browser.load("http://localhost:8080/?code=c&state=n1")

    machine = make_machine(browser, ok_backend)
    mount_and_settle(machine)

    assert machine.phase is ApplicationPhase.UNAUTHENTICATED
    assert isinstance(machine.last_rejection, MissingSavedState)
    assert ok_backend.requests == []


def test_unreadable_storage_path_reads_as_absent(tmp_path, monkeypatch) -> None:
    storage = OriginStorage("http://localhost:8080", str(tmp_path))

    def deny(self):
        raise PermissionError("permission denied")

    monkeypatch.setattr(Path, "exists", deny)

    with pytest.raises(StorageUnavailable):
        storage.get_item("oauth_state")


def test_local_browser_records_navigation_without_opening(tmp_path) -> None:
    browser = LocalBrowser("http://localhost:8080", "http://localhost:8080/", str(tmp_path), open_browser=False)
    browser.navigate("https://accounts.google.com/o/oauth2/v2/auth?state=x")
    assert browser.last_navigation == "https://accounts.google.com/o/oauth2/v2/auth?state=x"

    browser.load("http://localhost:8080/?code=c&state=x")
    assert browser.current_url == "http://localhost:8080/?code=c&state=x"
    browser.rewrite_url("http://localhost:8080/")
    assert browser.current_url == "http://localhost:8080/"
