import pytest
import sqlalchemy as sa  # type: ignore
from sqlalchemy import orm  # type: ignore

from ....exceptions import (
    CyclicRelationshipError,
    InvalidDeclarationError,
    InvalidQueryError,
    UnknownResourceTypeError,
)
from ....graph import collect_paths
from ....translator import SimpleQueryTranslator


@pytest.fixture
def decl():
    from ..declarative import SQLAResourceDescriptionRegistry

    return SQLAResourceDescriptionRegistry()


@pytest.fixture
def models(decl):
    Base = orm.declarative_base()

    @decl
    class MailAccount(Base):
        __tablename__ = "mail_accounts"

        class Meta:
            default_fields = ["name", "address"]
            relationships = ["folders"]

        id = sa.Column(sa.Integer(), primary_key=True, nullable=False)
        name = sa.Column(sa.String(), nullable=False)
        address = sa.Column(sa.String(), nullable=False)
        inbox_address = sa.Column(sa.String(), nullable=True)
        folders = orm.relationship("MailFolder", back_populates="account")

    @decl
    class MailFolder(Base):
        __tablename__ = "mail_folders"

        class Meta:
            relationships = ["messages"]

        id = sa.Column(sa.Integer(), primary_key=True, nullable=False)
        name = sa.Column(sa.String(), nullable=False)
        unread_messages = sa.Column(sa.Integer(), nullable=False)
        account_id = sa.Column(sa.Integer(), sa.ForeignKey(MailAccount.id), nullable=False)
        account = orm.relationship(MailAccount, back_populates="folders")
        messages = orm.relationship("MessageItem", back_populates="folder")

    @decl
    class MessageItem(Base):
        __tablename__ = "message_items"

        class Meta:
            type = "Message"
            fields = ["subject", "seen"]
            relationships = []

        id = sa.Column(sa.Integer(), primary_key=True, nullable=False)
        subject = sa.Column(sa.String(), nullable=False)
        seen = sa.Column(sa.Boolean(), nullable=False)
        size = sa.Column(sa.Integer(), nullable=False)
        folder_id = sa.Column(sa.Integer(), sa.ForeignKey(MailFolder.id), nullable=False)
        folder = orm.relationship(MailFolder, back_populates="messages")

    decl.configure()

    yield MailAccount, MailFolder, MessageItem

    orm.clear_mappers()


def test_descriptions(decl, models):
    MailAccount, MailFolder, MessageItem = models

    account = decl.query_description_by_class(MailAccount)
    assert account.type == "MailAccount"
    assert set(account.fields) == {"name", "address", "inbox_address"}
    assert list(account.default_fields) == ["name", "address"]

    folder = decl.query_description_by_class(MailFolder)
    assert folder.type == "MailFolder"
    assert set(folder.fields) == {"name", "unread_messages"}
    assert set(folder.default_fields) == {"name", "unread_messages"}

    message = decl.query_description_by_class(MessageItem)
    assert message.type == "Message"
    assert list(message.fields) == ["subject", "seen"]
    assert len(message.relationships) == 0

    assert list(account.relationships) == [folder]
    assert list(folder.relationships) == [message]
    assert decl.query_description_by_type("Message") is message


def test_paths(decl, models):
    MailAccount, _, _ = models
    account = decl.query_description_by_class(MailAccount)
    assert collect_paths(account, True) == [
        "MailAccount",
        "MailAccount.MailFolder",
        "MailAccount.MailFolder.Message",
    ]


def test_translate(decl, models):
    MailAccount, _, _ = models
    translator = SimpleQueryTranslator(decl.query_description_by_class(MailAccount))

    result = translator.translate(
        "include=MailFolder,Message&fields[MailAccount]=*,inbox_address&fields[Message]="
    )
    assert result.fields == {
        "MailAccount": ["name", "address", "inbox_address"],
        "MailFolder": [],
        "Message": [],
    }

    with pytest.raises(InvalidQueryError):
        translator.translate("fields[MailAccount]=id")


def test_unknown_type(decl, models):
    with pytest.raises(UnknownResourceTypeError) as e:
        decl.query_description_by_type("Foo")
    assert e.value.name == "Foo"
    assert set(e.value.candidates) == {"MailAccount", "MailFolder", "Message"}


def test_not_mapped(decl):
    class Foo:
        pass

    with pytest.raises(InvalidDeclarationError):
        decl.query_description_by_class(Foo)


def test_back_references_without_meta(decl):
    Base = orm.declarative_base()

    @decl
    class Parent(Base):
        __tablename__ = "parents"
        id = sa.Column(sa.Integer(), primary_key=True, nullable=False)
        children = orm.relationship("Child", back_populates="parent")

    @decl
    class Child(Base):
        __tablename__ = "children"
        id = sa.Column(sa.Integer(), primary_key=True, nullable=False)
        parent_id = sa.Column(sa.Integer(), sa.ForeignKey(Parent.id), nullable=False)
        parent = orm.relationship(Parent, back_populates="children")

    try:
        decl.configure()
        parent = decl.query_description_by_class(Parent)
        with pytest.raises(CyclicRelationshipError):
            collect_paths(parent)
    finally:
        orm.clear_mappers()


def test_unknown_relationship_name(decl):
    Base = orm.declarative_base()

    @decl
    class Foo(Base):
        __tablename__ = "foos"

        class Meta:
            relationships = ["bars"]

        id = sa.Column(sa.Integer(), primary_key=True, nullable=False)

    try:
        decl.configure()
        with pytest.raises(InvalidDeclarationError):
            decl.query_description_by_class(Foo).relationships
    finally:
        orm.clear_mappers()
