import pytest

from ..deferred import Deferred
from ..exceptions import InvalidDeclarationError
from ..graph import collect_paths
from ..models import StaticResourceDescription


class TestDeclarative:
    def test_describe(self):
        from ..declarative import describe

        @describe
        class MailAccount:
            class Meta:
                fields = ["name", "address", "inbox_address"]
                default_fields = ["name", "address"]
                relationships = [Deferred(lambda: MailFolder)]

        @describe
        class MailFolder:
            class Meta:
                type = "Folder"
                fields = ["name", "unreadMessages"]

        assert isinstance(MailAccount, StaticResourceDescription)
        assert MailAccount.type == "MailAccount"
        assert MailAccount.fields == ("name", "address", "inbox_address")
        assert MailAccount.default_fields == ("name", "address")
        assert list(MailAccount.relationships) == [MailFolder]

        assert MailFolder.type == "Folder"
        assert MailFolder.default_fields == ("name", "unreadMessages")
        assert len(MailFolder.relationships) == 0

        assert collect_paths(MailAccount, True) == ["MailAccount", "MailAccount.Folder"]

    def test_no_meta(self):
        from ..declarative import describe

        class Foo:
            pass

        with pytest.raises(InvalidDeclarationError):
            describe(Foo)

    def test_handle_meta(self):
        from ..declarative import Meta, handle_meta

        class _Meta:
            fields = ("a", "b")

        assert handle_meta(_Meta) == Meta(fields=("a", "b"))

    @pytest.mark.parametrize(
        "attrs",
        [
            {"type": 1},
            {"fields": "a,b"},
            {"fields": [1, 2]},
            {"default_fields": "a"},
            {"relationships": "MailFolder"},
        ],
    )
    def test_handle_meta_invalid(self, attrs):
        from ..declarative import handle_meta

        with pytest.raises(InvalidDeclarationError):
            handle_meta(type("Meta", (), attrs))
