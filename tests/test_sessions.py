"""
Tests for display handles and the per-session controller registry
"""
from conftest import FakeEditClient
from services.encoder import SourceImage
from services.handles import HandleRegistry, sniff_media_type
from services.sessions import SessionRegistry


class TestHandleRegistry:
    def test_create_get_release(self):
        handles = HandleRegistry()
        handle = handles.create(b"\x01\x02", "image/gif")

        assert handles.get(handle.handle_id) is handle
        assert handle.url == f"/api/images/{handle.handle_id}"
        assert handle.data_uri == "data:image/gif;base64,AQI="

        handles.release(handle)
        assert handles.get(handle.handle_id) is None
        assert len(handles) == 0

    def test_release_is_idempotent(self):
        handles = HandleRegistry()
        handle = handles.create(b"x", "image/png")

        handles.release(handle)
        handles.release(handle)
        handles.release(None)

        assert len(handles) == 0

    def test_sniff_media_type(self, png_bytes, jpeg_bytes):
        assert sniff_media_type(png_bytes) == "image/png"
        assert sniff_media_type(jpeg_bytes) == "image/jpeg"
        assert sniff_media_type(b"not an image") == "image/png"
        assert sniff_media_type(b"", default="image/webp") == "image/webp"


class TestSessionRegistry:
    def test_same_session_gets_same_controller(self):
        sessions = SessionRegistry(FakeEditClient())

        assert sessions.get("a") is sessions.get("a")
        assert sessions.get("a") is not sessions.get("b")
        assert len(sessions) == 2

    def test_eviction_releases_handles(self, png_bytes):
        sessions = SessionRegistry(FakeEditClient(), capacity=2)
        oldest = sessions.get("a")
        oldest.select_file(SourceImage(data=png_bytes, media_type="image/png"))
        sessions.get("b")

        sessions.get("c")

        assert "a" not in sessions
        assert len(sessions) == 2
        assert len(oldest.handles) == 0
        assert oldest.state.has_original is False

    def test_recent_use_protects_from_eviction(self):
        sessions = SessionRegistry(FakeEditClient(), capacity=2)
        sessions.get("a")
        sessions.get("b")
        sessions.get("a")

        sessions.get("c")

        assert "a" in sessions
        assert "b" not in sessions

    def test_peek_never_creates(self):
        sessions = SessionRegistry(FakeEditClient(), capacity=1)
        kept = sessions.get("a")

        assert sessions.peek("stranger") is None
        assert sessions.peek(None) is None
        assert sessions.peek("") is None
        assert len(sessions) == 1
        assert sessions.peek("a") is kept

    def test_peek_refreshes_recency(self):
        sessions = SessionRegistry(FakeEditClient(), capacity=2)
        sessions.get("a")
        sessions.get("b")
        sessions.peek("a")

        sessions.get("c")

        assert "a" in sessions
        assert "b" not in sessions

    def test_discard(self, png_bytes):
        sessions = SessionRegistry(FakeEditClient())
        controller = sessions.get("a")
        controller.select_file(SourceImage(data=png_bytes, media_type="image/png"))

        assert sessions.discard("a") is True
        assert sessions.discard("a") is False
        assert len(controller.handles) == 0

    def test_clear(self, png_bytes):
        sessions = SessionRegistry(FakeEditClient())
        sessions.get("a").select_file(SourceImage(data=png_bytes, media_type="image/png"))
        sessions.get("b")

        sessions.clear()

        assert len(sessions) == 0
