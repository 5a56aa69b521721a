from __future__ import annotations


class CatMap:
    """Bidirectional mapping between category strings and dense integer codes.

    Codes are handed out in first-seen order starting at 0, so ``back[code]``
    is always the string that produced ``code``.
    """

    def __init__(self, back: list[str] | None = None):
        self.back: list[str] = []
        self.map: dict[str, int] = {}
        for value in back or []:
            self.cat_to_num(value)

    def cat_to_num(self, value: str) -> int:
        code = self.map.get(value)
        if code is None:
            code = len(self.back)
            self.map[value] = code
            self.back.append(value)
        return code

    def num_to_cat(self, code: int) -> str:
        if code < 0 or code >= len(self.back):
            raise ValueError(f"unknown category code {code}")
        return self.back[code]

    def n_cats(self) -> int:
        return len(self.back)

    def copy(self) -> "CatMap":
        return CatMap(self.back)

    def __len__(self) -> int:
        return len(self.back)

    def __contains__(self, value) -> bool:
        return value in self.map

    def __repr__(self) -> str:
        return f"CatMap({self.back!r})"
