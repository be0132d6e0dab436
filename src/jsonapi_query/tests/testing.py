import typing

from ..deferred import Deferred
from ..models import ResourceDescription, ResourceDescriptionList, StaticResourceDescription


class CountingResourceDescription(StaticResourceDescription):
    """
    A :py:class:`StaticResourceDescription` that counts how often its
    relationships were looked up.
    """

    relationship_lookups: int = 0

    @property
    def relationships(self) -> ResourceDescriptionList:
        self.relationship_lookups += 1
        return super().relationships


def entity(
    type: str,
    relationships: typing.Iterable[
        typing.Union[ResourceDescription, Deferred[ResourceDescription]]
    ] = (),
    fields: typing.Iterable[str] = ("a", "b", "c"),
    default_fields: typing.Optional[typing.Iterable[str]] = ("a",),
) -> StaticResourceDescription:
    return CountingResourceDescription(
        type,
        fields=fields,
        default_fields=default_fields,
        relationships=relationships,
    )


def build_deep_graph() -> StaticResourceDescription:
    """
    .. code-block:: text

       entity
       └── entity_1
           ├── entity_1_1
           │   └── entity_1_1_1
           └── entity_1_2
               └── entity_1_2_1
    """
    return entity(
        "entity",
        [
            entity(
                "entity_1",
                [
                    entity("entity_1_1", [entity("entity_1_1_1")]),
                    entity("entity_1_2", [entity("entity_1_2_1")]),
                ],
            ),
        ],
    )


MailAccount = StaticResourceDescription(
    "MailAccount",
    fields=["name", "address", "replyTo", "inbox_address", "inbox_port", "outbox_address"],
    default_fields=["name", "address"],
)

MailFolder = StaticResourceDescription(
    "MailFolder",
    fields=["name", "unreadMessages", "totalMessages", "folderType", "data"],
    default_fields=["name", "unreadMessages", "folderType"],
    relationships=[MailAccount],
)

MessageBody = StaticResourceDescription(
    "MessageBody",
    fields=["textPlain", "textHtml"],
)

MessageItem = StaticResourceDescription(
    "MessageItem",
    fields=[
        "subject",
        "from",
        "to",
        "date",
        "seen",
        "flagged",
        "size",
        "hasAttachments",
        "previewText",
    ],
    default_fields=["subject", "from", "date", "seen", "flagged"],
    relationships=[MailFolder, Deferred(lambda: MessageBody)],
)
