"""Read helpers over a converted richtext tree."""

from collections.abc import Iterator

from pydantic import BaseModel

from docblog.richtext.models import Doc, HeadingNode, ImageNode, TextNode


def iter_nodes(node: BaseModel) -> Iterator[BaseModel]:
    """Yield node and all its descendants in document order."""
    yield node
    for child in getattr(node, "content", None) or []:
        yield from iter_nodes(child)


def extract_text(node: BaseModel) -> str:
    return "".join(n.text for n in iter_nodes(node) if isinstance(n, TextNode))


def extract_and_remove_first_h1(doc: Doc) -> tuple[Doc, str | None]:
    """Remove the first level-1 heading (depth first) and return its text.

    The page title lives outside the body in the CMS, so it is lifted out of
    the richtext. Returns a new Doc; the input is left untouched.
    """
    result = doc.model_copy(deep=True)
    heading = _remove_first_h1(result)
    if heading is None:
        return result, None
    return result, extract_text(heading).strip()


def _remove_first_h1(container: BaseModel) -> HeadingNode | None:
    children = getattr(container, "content", None) or []
    for i, child in enumerate(children):
        if isinstance(child, HeadingNode) and child.level == 1:
            del children[i]
            return child
        found = _remove_first_h1(child)
        if found is not None:
            return found
    return None


def first_image_src(doc: Doc) -> str | None:
    """The src of the first image in document order, used as the cover image."""
    for node in iter_nodes(doc):
        if isinstance(node, ImageNode) and node.attrs.src:
            return node.attrs.src
    return None
