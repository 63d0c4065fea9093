"""
Student board state

BoardState holds what the table view shows: the current filters, the sort
column and the selected record. Filters are always applied by the server;
changing one re-fetches the list. Sorting only reorders the fetched rows.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from cli.api_client import StudentRecordsClient


CLASS_OPTIONS = ["Grade 1", "Grade 2", "Grade 3", "Grade 4", "Grade 5"]
RANK_OPTIONS = ["excellent", "good", "average", "needs-improvement"]
FILTER_ALL = "all"

# Column name -> key in the student JSON
SORT_COLUMNS = {
    "name": "name",
    "class": "class",
    "address": "address",
    "phone": "phone",
    "rank": "rank",
    "created": "createdAt",
    "updated": "updatedAt",
}


def normalize_filter(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    stripped = value.strip()
    if not stripped or stripped.lower() == FILTER_ALL:
        return None
    return value


def _sort_key(column: str, student: Dict[str, Any]):
    value = student.get(SORT_COLUMNS[column])
    if column == "rank":
        return RANK_OPTIONS.index(value) if value in RANK_OPTIONS else len(RANK_OPTIONS)
    if isinstance(value, str):
        return value.lower()
    return value or ""


@dataclass
class BoardState:
    search: Optional[str] = None
    class_filter: Optional[str] = None
    rank_filter: Optional[str] = None
    sort_column: Optional[str] = None
    sort_descending: bool = False
    selected_id: Optional[str] = None

    students: List[Dict[str, Any]] = field(default_factory=list)
    stats: Dict[str, Any] = field(default_factory=dict)

    def query_params(self) -> Dict[str, Optional[str]]:
        return {
            "search": self.search,
            "class_name": self.class_filter,
            "rank": self.rank_filter,
        }

    def set_sort(self, column: Optional[str]) -> None:
        """Sort by column; choosing the current column again flips direction"""
        if column is None:
            self.sort_column = None
            self.sort_descending = False
            return
        if column not in SORT_COLUMNS:
            raise ValueError(f"Unknown sort column: {column}")
        if column == self.sort_column:
            self.sort_descending = not self.sort_descending
        else:
            self.sort_column = column
            self.sort_descending = False

    def sorted_students(self) -> List[Dict[str, Any]]:
        if self.sort_column is None:
            return list(self.students)
        return sorted(
            self.students,
            key=lambda s: _sort_key(self.sort_column, s),
            reverse=self.sort_descending,
        )

    def select(self, student_id: Optional[str]) -> Optional[Dict[str, Any]]:
        if student_id is None:
            self.selected_id = None
            return None
        for student in self.students:
            if student["id"] == student_id:
                self.selected_id = student_id
                return student
        self.selected_id = None
        return None

    @property
    def selected(self) -> Optional[Dict[str, Any]]:
        if self.selected_id is None:
            return None
        return next((s for s in self.students if s["id"] == self.selected_id), None)


class Board:
    """Keeps a BoardState in step with the server"""

    def __init__(self, client: StudentRecordsClient, state: Optional[BoardState] = None):
        self.client = client
        self.state = state or BoardState()

    def refresh_list(self) -> List[Dict[str, Any]]:
        self.state.students = self.client.list_students(**self.state.query_params())
        if self.state.selected is None:
            self.state.selected_id = None
        return self.state.students

    def refresh_stats(self) -> Dict[str, Any]:
        self.state.stats = self.client.get_stats()
        return self.state.stats

    def refresh(self) -> None:
        self.refresh_list()
        self.refresh_stats()

    # ==================== Filters (each change re-fetches) ====================

    def set_search(self, text: Optional[str]) -> None:
        self.state.search = normalize_filter(text)
        self.refresh_list()

    def set_class_filter(self, class_name: Optional[str]) -> None:
        self.state.class_filter = normalize_filter(class_name)
        self.refresh_list()

    def set_rank_filter(self, rank: Optional[str]) -> None:
        self.state.rank_filter = normalize_filter(rank)
        self.refresh_list()

    def clear_filters(self) -> None:
        self.state.search = None
        self.state.class_filter = None
        self.state.rank_filter = None
        self.refresh_list()

    # ==================== Mutations (list and stats re-fetched on success) ====================

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        student = self.client.create_student(data)
        self.refresh()
        return student

    def update(self, student_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        student = self.client.update_student(student_id, data)
        self.refresh()
        return student

    def delete(self, student_id: str) -> None:
        self.client.delete_student(student_id)
        if self.state.selected_id == student_id:
            self.state.selected_id = None
        self.refresh()
