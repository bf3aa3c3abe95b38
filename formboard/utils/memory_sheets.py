"""
メモリ上のスプレッドシート
テストやローカル動作確認用に SheetsDataSource と同じ操作を提供する
"""
import copy
import re
from typing import Dict, List, Optional, Set, Tuple

from formboard.services.sheets_client import Grid, column_index, split_range

_CELL_RE = re.compile(r"^([A-Za-z]+)(\d+)$")

DEFAULT_TAB = ""


class InMemorySheets:
    """
    {スプレッドシートID: {タブ名: グリッド}} を保持するデータソース

    タブ名を省略した範囲（"A:Z"）は最初に登録したタブを参照する。
    failing に含まれるIDへの fetch は取得失敗として空グリッドを返す。
    """

    def __init__(self):
        self.books: Dict[str, Dict[str, Grid]] = {}
        self.failing: Set[str] = set()
        self.fetch_log: List[Tuple[str, str]] = []

    def put(self, spreadsheet_id: str, grid: Grid, sheet_name: Optional[str] = None) -> None:
        book = self.books.setdefault(spreadsheet_id, {})
        book[sheet_name or DEFAULT_TAB] = [list(row) for row in grid]

    def grid(self, spreadsheet_id: str, sheet_name: Optional[str] = None) -> Grid:
        return self._tab(spreadsheet_id, sheet_name) or []

    def _tab(self, spreadsheet_id: str, sheet_name: Optional[str]) -> Optional[Grid]:
        book = self.books.get(spreadsheet_id)
        if not book:
            return None
        if sheet_name is None:
            if DEFAULT_TAB in book:
                return book[DEFAULT_TAB]
            return next(iter(book.values()))
        return book.get(sheet_name)

    def fetch(self, spreadsheet_id: str, range_spec: str) -> Grid:
        self.fetch_log.append((spreadsheet_id, range_spec))
        if spreadsheet_id in self.failing:
            print(f"[Sheets] データ取得失敗 ID:{spreadsheet_id} Range:{range_spec}")
            return []
        sheet_name, _ = split_range(range_spec)
        tab = self._tab(spreadsheet_id, sheet_name)
        if tab is None:
            return []
        return copy.deepcopy(tab)

    def update(self, spreadsheet_id: str, cell_range: str, values: Grid) -> None:
        sheet_name, cells = split_range(cell_range)
        tab = self._tab(spreadsheet_id, sheet_name)
        if tab is None:
            raise KeyError(f"unknown range: {spreadsheet_id} {cell_range}")
        m = _CELL_RE.match(cells)
        if not m:
            raise ValueError(f"single-cell range expected: {cell_range}")
        col = column_index(m.group(1))
        row = int(m.group(2)) - 1
        for r_offset, row_values in enumerate(values):
            while len(tab) <= row + r_offset:
                tab.append([])
            target = tab[row + r_offset]
            for c_offset, value in enumerate(row_values):
                while len(target) <= col + c_offset:
                    target.append("")
                target[col + c_offset] = value

    def append(self, spreadsheet_id: str, range_spec: str, rows: Grid) -> None:
        sheet_name, _ = split_range(range_spec)
        tab = self._tab(spreadsheet_id, sheet_name)
        if tab is None:
            self.put(spreadsheet_id, [], sheet_name)
            tab = self._tab(spreadsheet_id, sheet_name)
        tab.extend([list(row) for row in rows])
