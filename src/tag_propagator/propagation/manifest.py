"""Locate Kustomize overlay manifests and rewrite their image tag.

The tag is changed by splicing the new scalar into the original text at the
position PyYAML's composer reports for it, so comments, key order and the
spelling of every other value survive the edit.
"""

from __future__ import annotations

import json
from pathlib import Path

import yaml

from tag_propagator.client.errors import ManifestError
from tag_propagator.config.constants import DEFAULT_MANIFEST_FILE
from tag_propagator.models.tier import Tier

TAG_FIELD = "newTag"
NULL_TAG = "tag:yaml.org,2002:null"


def manifest_path(
    root: Path,
    short_name: str,
    tier: Tier,
    manifest_file: str = DEFAULT_MANIFEST_FILE,
) -> Path:
    """``<root>/services/<short-name>/overlays/<tier>/<manifest-file>``."""
    return Path(root) / "services" / short_name / "overlays" / tier.value / manifest_file


def _compose(path: Path) -> tuple[str, yaml.MappingNode]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ManifestError(f"Cannot read {path}: {exc}") from exc
    try:
        root = yaml.compose(text, Loader=yaml.SafeLoader)
    except yaml.YAMLError as exc:
        raise ManifestError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(root, yaml.MappingNode):
        raise ManifestError(f"{path} is not a YAML mapping")
    return text, root


def _get(node: yaml.MappingNode, key: str) -> tuple[yaml.Node, yaml.Node] | None:
    for key_node, value_node in node.value:
        if isinstance(key_node, yaml.ScalarNode) and key_node.value == key:
            return key_node, value_node
    return None


def _find_entry(root: yaml.MappingNode, path: Path, image: str) -> yaml.MappingNode:
    """Pick the ``images`` entry for *image* (``registry/short-name``).

    Matches on the full repository, the bare short name, or a ``/short-name``
    suffix; falls back to the first entry when nothing matches.
    """
    pair = _get(root, "images")
    if pair is None or not isinstance(pair[1], yaml.SequenceNode) or not pair[1].value:
        raise ManifestError(f"{path} has no 'images' list to update")
    entries = [e for e in pair[1].value if isinstance(e, yaml.MappingNode)]
    if not entries:
        raise ManifestError(f"{path} 'images' list has no mapping entries")
    short = image.rsplit("/", 1)[-1]
    for entry in entries:
        name_pair = _get(entry, "name")
        name = name_pair[1].value if name_pair and isinstance(name_pair[1], yaml.ScalarNode) else ""
        if name in (image, short) or name.endswith(f"/{short}"):
            return entry
    return entries[0]


def _tag_of(entry: yaml.MappingNode, path: Path) -> str | None:
    """Tag text as written in the manifest, or None when unset."""
    pair = _get(entry, TAG_FIELD)
    if pair is None:
        return None
    node = pair[1]
    if not isinstance(node, yaml.ScalarNode):
        raise ManifestError(f"{path} has a non-scalar '{TAG_FIELD}'")
    return None if node.tag == NULL_TAG else node.value


def _scalar(tag: str) -> str:
    """*tag* as a YAML scalar that reads back as the same string."""
    try:
        plain = yaml.safe_load(tag) == tag
    except yaml.YAMLError:
        plain = False
    if plain and not any(c in tag for c in ",[]{}"):
        return tag
    return json.dumps(tag)


def _splice(text: str, entry: yaml.MappingNode, tag: str) -> str:
    value = _scalar(tag)
    pair = _get(entry, TAG_FIELD)
    if pair is not None:
        key, node = pair
        start, end = node.start_mark.index, node.end_mark.index
        if start == end:
            # "newTag:" with nothing after the colon
            start = end = text.index(":", key.end_mark.index) + 1
            value = f" {value}"
        elif node.style in ("|", ">"):
            value += "\n"
        return text[:start] + value + text[end:]

    line = f"{TAG_FIELD}: {value}"
    if entry.flow_style:
        close = entry.end_mark.index - 1
        return text[:close] + (f", {line}" if entry.value else line) + text[close:]

    indent = " " * entry.value[0][0].start_mark.column
    last_key, last_value = entry.value[-1]
    mark = last_value.end_mark if last_value.end_mark.index > last_value.start_mark.index else last_key.end_mark
    line_start = text.rfind("\n", 0, mark.index) + 1
    if not text[line_start:mark.index].strip():
        # the last value ended on an earlier line
        return text[:line_start] + f"{indent}{line}\n" + text[line_start:]
    line_end = text.find("\n", mark.index)
    if line_end == -1:
        line_end = len(text)
    return text[:line_end] + f"\n{indent}{line}" + text[line_end:]


def _rewrite(path: Path, image: str, tag: str) -> tuple[str, str | None, str]:
    text, root = _compose(path)
    entry = _find_entry(root, path, image)
    previous = _tag_of(entry, path)
    if previous == tag:
        return text, previous, text
    return text, previous, _splice(text, entry, tag)


def read_image_tag(path: Path, image: str) -> str | None:
    """Current tag recorded for *image* in the manifest at *path*."""
    _, root = _compose(path)
    return _tag_of(_find_entry(root, path, image), path)


def render_update(path: Path, image: str, tag: str) -> tuple[str, str]:
    """Return (current text, text after setting the tag) without writing."""
    before, _, after = _rewrite(path, image, tag)
    return before, after


def set_image_tag(path: Path, image: str, tag: str) -> tuple[str | None, bool]:
    """Set the image tag in the manifest at *path*.

    Returns ``(previous_tag, changed)``. Only the tag scalar is rewritten; the
    file is left untouched when the tag already matches.
    """
    before, previous, after = _rewrite(path, image, tag)
    if after == before:
        return previous, False
    try:
        path.write_text(after, encoding="utf-8")
    except OSError as exc:
        raise ManifestError(f"Cannot write {path}: {exc}") from exc
    return previous, True
