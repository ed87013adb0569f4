"""List diffing for pushing incremental night updates to clients.

Two nights are the same item when their ``night_id`` matches and have the
same contents when their dicts compare equal.
"""

from difflib import SequenceMatcher


def diff_nights(old, new):
    """Return the operations turning ``old`` into ``new``.

    Each operation is a dict with ``op`` in ('insert', 'remove', 'change'),
    the target ``position`` in the new list (or old list for removals) and
    the affected ``night``.
    """
    old_ids = [n['night_id'] for n in old]
    new_ids = [n['night_id'] for n in new]
    ops = []
    matcher = SequenceMatcher(a=old_ids, b=new_ids, autojunk=False)
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == 'equal':
            for offset in range(i2 - i1):
                before, after = old[i1 + offset], new[j1 + offset]
                if before != after:
                    ops.append({'op': 'change', 'position': j1 + offset, 'night': after})
            continue
        if tag in ('delete', 'replace'):
            for idx in range(i1, i2):
                ops.append({'op': 'remove', 'position': idx, 'night': old[idx]})
        if tag in ('insert', 'replace'):
            for idx in range(j1, j2):
                ops.append({'op': 'insert', 'position': idx, 'night': new[idx]})
    return ops
