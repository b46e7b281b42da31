"""Merge the per-item lists produced by the converter into idiomatic nested lists.

The converter emits every list item as its own list, wrapped once per nesting
level. Adjacent lists are coalesced here: list items are appended to the open
list, and nesting wrappers attach to the last list item so that sub-items end
up inside their parent item.
"""

from docblog.richtext.models import BlockNode, ListItemNode, ListNode, is_list


def normalize_lists(blocks: list[BlockNode]) -> list[BlockNode]:
    """Coalesce adjacent list blocks. Returns new nodes; the input is not modified.

    A list whose first child is a list item of a different kind than the open
    list closes it. A list that starts with a nesting wrapper continues the
    open list whatever its own kind, since it describes sub-items of the
    preceding item. Normalizing an already normalized sequence is a no-op.
    """
    output: list[BlockNode] = []
    open_list: ListNode | None = None

    for block in blocks:
        if not is_list(block):
            open_list = None
            output.append(block.model_copy(deep=True))
            continue

        if open_list is not None and _continues(open_list, block):
            _merge_into(open_list, block.model_copy(deep=True).content)
            continue

        open_list = block.model_copy(deep=True)
        output.append(open_list)

    return output


def _continues(open_list: ListNode, block: ListNode) -> bool:
    if not block.content:
        return open_list.type == block.type
    first = block.content[0]
    if isinstance(first, ListItemNode):
        return open_list.type == block.type
    return True


def _merge_into(target: ListNode, children: list) -> None:
    for child in children:
        if isinstance(child, ListItemNode):
            target.content.append(child)
            continue

        last = target.content[-1] if target.content else None
        if isinstance(last, ListItemNode):
            _attach_nested(last, child)
        elif last is not None and last.type == child.type:
            _merge_into(last, child.content)
        else:
            target.content.append(child)


def _attach_nested(item: ListItemNode, sublist: ListNode) -> None:
    """Put sublist's items under item, extending its trailing list of the same kind."""
    last = item.content[-1] if item.content else None
    if last is not None and is_list(last) and last.type == sublist.type:
        _merge_into(last, sublist.content)
    else:
        item.content.append(sublist)
