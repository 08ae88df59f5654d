"""グループインデックスの圧縮。

グループに属するオプションが値を得た疎インデックスを集め、
昇順を保ったまま 0 から始まる密インデックスに詰める。
"""

from __future__ import annotations

from cmdconf.config._context import ResolveContext


def compact_group_indexes(ctx: ResolveContext) -> dict[str, tuple[int, ...]]:
    """グループごとに使用済みの疎インデックスを昇順で返す。

    戻り値のタプル内の位置が密インデックスになる。
    値を1つも持たないグループは空タプル。コマンドで無効なオプションは数えない。

    Args:
        ctx: 全ての入力フェーズを終えた解決コンテキスト。

    Returns:
        グループ名 → 疎インデックスの昇順タプル。
    """
    used: dict[str, set[int]] = {group.name: set() for group in ctx.schema.groups}

    for option in ctx.schema.options():
        if option.group is None or not ctx.option_valid(option.name):
            continue
        used[option.group].update(ctx.occurrences.found_indexes(option.name))

    return {group: tuple(sorted(indexes)) for group, indexes in used.items()}
