# cmdscan: external command auditor for shell scripts
# Copyright (C) 2026 cmdscan Project Contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""Normalizer: turn the raw token stream into a sorted unique term list."""

from __future__ import annotations

from typing import Iterable, Union

from cmdscan.models.tokens import Token


def _sort_key(term: str) -> tuple[str, str]:
    # Fold to upper case like `sort -f`; ties fall back to plain byte order.
    return term.upper(), term


def normalize_terms(tokens: Iterable[Union[Token, str]]) -> list[str]:
    """Sort terms case-insensitively and drop exact duplicates.

    ``Foo`` and ``foo`` are different terms and both survive. An empty
    result means no tokens were found; callers treat that as a terminal
    "nothing to classify" state rather than an error.
    """
    texts = {tok.text if isinstance(tok, Token) else tok for tok in tokens}
    return sorted(texts, key=_sort_key)
