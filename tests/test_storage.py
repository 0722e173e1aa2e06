import pytest

from app.core.cert_storage import generated_key, public_url, sibling_config_key, template_key
from app.core.errors import NotFoundError


class TestKeys:
    def test_layout(self):
        assert template_key("a.png") == "certificates/a.png"
        assert generated_key("b.pdf") == "certificates/generated/b.pdf"

    def test_sibling_config(self):
        assert sibling_config_key("certificates/certificate_E1_20250110.png") == \
            "certificates/certificate_E1_20250110.json"

    def test_public_url(self):
        assert public_url("certificates/a b.png") == "http://testserver/api/storage/certificates/a%20b.png"


class TestLocalStorage:
    def test_put_get_delete(self, storage):
        storage.put_bytes("certificates/x.json", b"{}", "application/json")
        assert storage.exists("certificates/x.json")
        assert storage.get_bytes("certificates/x.json") == b"{}"

        storage.delete("certificates/x.json")
        assert not storage.exists("certificates/x.json")

    def test_missing_object(self, storage):
        with pytest.raises(NotFoundError):
            storage.get_bytes("certificates/nothing.png")

    def test_cannot_escape_root(self, storage):
        with pytest.raises(NotFoundError):
            storage.get_bytes("../../etc/passwd")
