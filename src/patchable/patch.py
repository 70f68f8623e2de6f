"""
Document partial modification (patch) module.

Two patch strategies are supported, selected by the media type of the request
entity-body:

• application/json-patch+json: a list of RFC 6902 operations, applied to the JSON
  representation of the target.
• application/json: a partial JSON object, whose properties overwrite the
  corresponding properties of the target.
"""

# Copyright © 2015–2018 Paul Bryan.
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

import jsonpatch
import jsonpointer
import logging
import patchable.resource
import patchable.schema as s


_logger = logging.getLogger(__name__)


JSON = "application/json"

JSON_PATCH = "application/json-patch+json"


class PatchError(Exception):
    """Raised if a patch could not be applied to its target."""


class BodyParseError(patchable.resource.BadRequest):
    """Raised if a patch entity-body is not valid JSON."""


class ObjectPatch:
    """
    Base class for a patch that can be applied to an object.

    Parameters:
    • patch: Patch document, in JSON object model representation.
    """

    def __init__(self, patch):
        self.patch = patch

    def apply(self, target, schema):
        """
        Apply the patch to the target, updating it in place. Returns the updated
        target. Raises PatchError if the patch could not be applied, in which case
        the target is not modified.

        Parameters:
        • target: Object to be patched.
        • schema: Schema of the object to be patched.
        """
        raise NotImplementedError

    def __repr__(self):
        return f"{self.__class__.__name__}({self.patch!r})"


class JSONPatch(ObjectPatch):
    """A list of operations to apply to an object, per RFC 6902."""

    def apply(self, target, schema):
        source = schema.json_encode(target)
        try:
            result = jsonpatch.JsonPatch(self.patch).apply(source)
        except (
            jsonpatch.JsonPatchException,
            jsonpointer.JsonPointerException,
            AttributeError,
            IndexError,
            KeyError,
            TypeError,
            RecursionError,
        ) as e:  # malformed operations or pointers surface as builtin errors
            raise PatchError(f"cannot apply JSON patch: {e}") from e
        try:
            return schema.merge(target, result)
        except s.SchemaError as se:
            raise PatchError(f"cannot merge JSON patch result: {se}") from se


class PartialPatch(ObjectPatch):
    """A partial object whose properties overwrite those of the target object."""

    def apply(self, target, schema):
        try:
            return schema.merge(target, self.patch)
        except s.SchemaError as se:
            raise PatchError(f"cannot merge partial object: {se}") from se


readers = {
    JSON_PATCH: JSONPatch,
    JSON: PartialPatch,
}


def _media_type(value):
    """Return the media type without parameters, in lower case."""
    return (value or "").split(";", 1)[0].strip().lower()


def is_readable(media_type):
    """Return if an entity-body of the media type can be read as a patch."""
    return _media_type(media_type) in readers


def read(media_type, content):
    """
    Read a patch from an entity-body. The entire body is parsed as JSON; the patch
    strategy is determined by its media type.

    Parameters:
    • media_type: Media type of the entity-body.
    • content: Entity-body, as bytes.
    """
    cls = readers.get(_media_type(media_type))
    if cls is None:
        raise patchable.resource.UnsupportedMediaType(
            f"unsupported patch media type: {media_type}"
        )
    try:
        patch = s.parse_json(content.decode())
    except ValueError as ve:  # includes UnicodeDecodeError and excessive nesting
        raise BodyParseError(f"malformed patch document: {ve}") from ve
    _logger.debug("read %s patch", cls.__name__)
    return cls(patch)


class Entity:
    """
    A request entity-body to be read as a patch. Reading is deferred until the
    entity is consumed, which allows the target of the patch to be resolved first.

    Parameters and instance variables:
    • media_type: Media type of the entity-body.
    • content: Entity-body, as bytes.
    """

    def __init__(self, media_type, content):
        self.media_type = media_type
        self.content = content

    def read(self):
        """Read the entity-body as a patch."""
        return read(self.media_type, self.content)
