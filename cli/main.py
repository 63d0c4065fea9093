#!/usr/bin/env python3
"""
Student Records CLI - Main Entry Point

Usage:
    studentrecords login                       Log in (prompts for credentials)
    studentrecords whoami                      Show the logged-in user
    studentrecords list --class "Grade 2"      List students (server-side filters)
    studentrecords list --sort name --desc     Sort the fetched rows
    studentrecords stats                       Show the overview counters
    studentrecords add                         Create a student
    studentrecords edit ID                     Update a student
    studentrecords delete ID [--yes]           Delete a student
    studentrecords board                       Interactive board
    studentrecords logout                      End the session

IDs may be abbreviated to any unique prefix (the table shows 8 characters).
"""

import argparse
import sys
from typing import Any, Callable, Dict, List, Optional

import httpx
from rich.console import Console
from rich.prompt import Confirm, Prompt

from cli.api_client import (
    ApiError,
    NotFoundError,
    StudentRecordsClient,
    UnauthorizedError,
    ValidationFailed,
)
from cli.board import Board, CLASS_OPTIONS, FILTER_ALL, RANK_OPTIONS, SORT_COLUMNS, normalize_filter
from cli.config import CLIConfig
from cli.renderer import StudentRenderer


BOARD_HELP = """[bold]Board commands[/bold]
  s TEXT     search by name (empty clears)
  c CLASS    class filter (all clears)
  r RANK     rank filter (all clears)
  x          clear all filters
  o COLUMN   sort by column (again flips direction)
  v ROW|ID   view and select a student
  a          add a student
  e ROW|ID   edit a student
  d ROW|ID   delete a student
  h          this help
  q          quit"""


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI"""
    parser = argparse.ArgumentParser(
        prog="studentrecords",
        description="Student Records - manage student records from the terminal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--server-url",
        type=str,
        default=None,
        help="API base URL (default: config file, STUDENTRECORDS_API_URL or http://localhost:5000/api)"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show error details")

    sub = parser.add_subparsers(dest="command")

    login = sub.add_parser("login", help="Log in")
    login.add_argument("-u", "--username", help="Username (prompted if omitted)")

    sub.add_parser("logout", help="End the session")
    sub.add_parser("whoami", help="Show the logged-in user")

    list_cmd = sub.add_parser("list", help="List students")
    list_cmd.add_argument("--search", help="Name contains (case-insensitive)")
    list_cmd.add_argument("--class", dest="class_name", help="Exact class, e.g. 'Grade 2'")
    list_cmd.add_argument("--rank", choices=RANK_OPTIONS + [FILTER_ALL], help="Exact rank")
    list_cmd.add_argument("--sort", choices=sorted(SORT_COLUMNS), help="Sort column")
    list_cmd.add_argument("--desc", action="store_true", help="Sort descending")

    sub.add_parser("stats", help="Show the overview counters")

    show = sub.add_parser("show", help="Show one student")
    show.add_argument("id")

    sub.add_parser("add", help="Create a student")

    edit = sub.add_parser("edit", help="Update a student")
    edit.add_argument("id")

    delete = sub.add_parser("delete", help="Delete a student")
    delete.add_argument("id")
    delete.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation")

    sub.add_parser("board", help="Interactive board")

    return parser


class StudentCLI:
    """Command handlers; every 401 sends the user back to the login prompt"""

    def __init__(self, config: CLIConfig, console: Optional[Console] = None,
                 transport: Optional[httpx.BaseTransport] = None):
        self.config = config
        self.console = console or Console()
        self.client = StudentRecordsClient(config, transport=transport)
        self.board = Board(self.client)
        self.renderer = StudentRenderer(self.console)

    def close(self) -> None:
        self.client.close()

    # ==================== Helpers ====================

    def prompt_login(self, username: Optional[str] = None) -> Dict[str, Any]:
        """Ask for credentials until the server accepts them"""
        while True:
            username = username or Prompt.ask("Username", console=self.console)
            password = Prompt.ask("Password", password=True, console=self.console)
            try:
                user = self.client.login(username, password)
            except UnauthorizedError:
                self.renderer.render_error("Invalid credentials")
                username = None
                continue
            except ValidationFailed as e:
                self.renderer.render_field_errors(e.errors)
                username = None
                continue
            self.renderer.render_success("Login successful")
            self.renderer.render_user(user)
            return user

    def with_login(self, action: Callable[[], Any]) -> Any:
        """Run action; on 401 prompt for login and retry once"""
        try:
            return action()
        except UnauthorizedError:
            self.renderer.render_warning("Session missing or expired, please log in.")
            self.prompt_login()
            return action()

    def resolve_id(self, ref: str) -> str:
        """Accept a full id, a unique id prefix, or a 1-based row number of the current board"""
        if ref.isdigit() and self.board.state.students:
            rows = self.board.state.sorted_students()
            index = int(ref) - 1
            if 0 <= index < len(rows):
                return rows[index]["id"]

        students = self.board.state.students or self.client.list_students()
        if any(s["id"] == ref for s in students):
            return ref
        matches = [s["id"] for s in students if s["id"].startswith(ref)]
        if len(matches) == 1:
            return matches[0]
        if len(matches) > 1:
            raise ApiError(f"Ambiguous id prefix '{ref}'")
        # Let the server answer 404 for unknown ids
        return ref

    def prompt_student(self, defaults: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        defaults = defaults or {}

        def ask(label: str, key: str, **kwargs) -> str:
            if defaults.get(key):
                kwargs["default"] = defaults[key]
            return Prompt.ask(label, console=self.console, **kwargs)

        return {
            "name": ask("Name", "name"),
            "class": ask("Class", "class", choices=CLASS_OPTIONS),
            "address": ask("Address", "address"),
            "phone": ask("Phone (XXX) XXX-XXXX", "phone"),
            "rank": ask("Rank", "rank", choices=RANK_OPTIONS),
        }

    def student_dialog(self, submit: Callable[[Dict[str, Any]], Dict[str, Any]],
                       defaults: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Prompt and submit; re-prompt on 400, log in again and resubmit on 401"""
        data = self.prompt_student(defaults)
        while True:
            try:
                return submit(data)
            except UnauthorizedError:
                # Entered values survive the re-login
                self.renderer.render_warning("Session missing or expired, please log in.")
                self.prompt_login()
            except ValidationFailed as e:
                self.renderer.render_error(e.message)
                self.renderer.render_field_errors(e.errors)
                data = self.prompt_student(data)

    # ==================== Commands ====================

    def cmd_login(self, args) -> int:
        self.prompt_login(getattr(args, "username", None))
        return 0

    def cmd_logout(self, args) -> int:
        self.client.logout()
        self.renderer.render_success("Logged out")
        return 0

    def cmd_whoami(self, args) -> int:
        user = self.with_login(self.client.current_user)
        self.renderer.render_user(user)
        return 0

    def cmd_list(self, args) -> int:
        state = self.board.state
        state.search = normalize_filter(args.search)
        state.class_filter = normalize_filter(args.class_name)
        state.rank_filter = normalize_filter(args.rank)
        if args.sort:
            state.set_sort(args.sort)
            state.sort_descending = args.desc

        self.with_login(self.board.refresh_list)
        self.renderer.render_students(state.sorted_students())
        self.console.print(f"[dim]{len(state.students)} student(s)[/dim]")
        return 0

    def cmd_stats(self, args) -> int:
        stats = self.with_login(self.board.refresh_stats)
        self.renderer.render_stats(stats)
        return 0

    def cmd_show(self, args) -> int:
        student = self.with_login(lambda: self.client.get_student(self.resolve_id(args.id)))
        self.renderer.render_student(student)
        return 0

    def cmd_add(self, args) -> int:
        self.with_login(self.board.refresh)
        student = self.student_dialog(self.board.create)
        self.renderer.render_success(f"Student '{student['name']}' created")
        self.renderer.render_stats(self.board.state.stats)
        return 0

    def cmd_edit(self, args) -> int:
        student_id = self.with_login(lambda: self.resolve_id(args.id))
        current = self.with_login(lambda: self.client.get_student(student_id))
        student = self.student_dialog(lambda data: self.board.update(student_id, data), defaults=current)
        self.renderer.render_success(f"Student '{student['name']}' updated")
        return 0

    def cmd_delete(self, args) -> int:
        student_id = self.with_login(lambda: self.resolve_id(args.id))
        student = self.with_login(lambda: self.client.get_student(student_id))
        if not args.yes and not Confirm.ask(f"Delete '{student['name']}'?", console=self.console):
            self.renderer.render_info("Cancelled")
            return 1
        self.with_login(lambda: self.board.delete(student_id))
        self.renderer.render_success(f"Student '{student['name']}' deleted")
        return 0

    def cmd_board(self, args) -> int:
        self.with_login(self.board.refresh)
        self.renderer.render_board(self.board.state)
        self.console.print(BOARD_HELP)

        while True:
            line = Prompt.ask("[bold cyan]board[/bold cyan]", default="", console=self.console).strip()
            if not line:
                continue
            command, _, arg = line.partition(" ")
            arg = arg.strip()
            if command in ("q", "quit", "exit"):
                return 0
            if command in ("h", "help", "?"):
                self.console.print(BOARD_HELP)
                continue
            try:
                self.with_login(lambda: self.board_command(command, arg))
            except NotFoundError as e:
                self.renderer.render_error(e.message)
                self.board.refresh()
                self.renderer.render_board(self.board.state)
            except (ApiError, ValueError) as e:
                self.renderer.render_error(str(e))

    def board_command(self, command: str, arg: str) -> None:
        board = self.board
        if command == "s":
            board.set_search(arg)
        elif command == "c":
            board.set_class_filter(arg)
        elif command == "r":
            board.set_rank_filter(arg)
        elif command == "x":
            board.clear_filters()
        elif command == "o":
            board.state.set_sort(arg or None)
        elif command == "v":
            student = board.state.select(self.resolve_id(arg))
            if student is None:
                raise NotFoundError("Student not found", status_code=404)
            self.renderer.render_student(student)
            return
        elif command == "a":
            self.student_dialog(board.create)
        elif command == "e":
            student_id = self.resolve_id(arg)
            current = board.state.select(student_id) or self.client.get_student(student_id)
            self.student_dialog(lambda data: board.update(student_id, data), defaults=current)
        elif command == "d":
            student_id = self.resolve_id(arg)
            if Confirm.ask("Delete this student?", console=self.console):
                board.delete(student_id)
        else:
            raise ValueError(f"Unknown command '{command}' (h for help)")
        self.renderer.render_board(board.state)

    def run(self, args) -> int:
        handler = getattr(self, f"cmd_{args.command}", None)
        if handler is None:
            return 2
        try:
            return handler(args)
        except ValidationFailed as e:
            self.renderer.render_error(e.message)
            self.renderer.render_field_errors(e.errors)
        except ApiError as e:
            self.renderer.render_error(e.message, details=f"HTTP {e.status_code}" if self.config.verbose and e.status_code else None)
        except KeyboardInterrupt:
            self.console.print("\n[dim]Cancelled[/dim]")
        return 1


def main(argv: Optional[List[str]] = None):
    """Main entry point"""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    config = CLIConfig.load_default()
    if args.server_url:
        config.api_base_url = args.server_url
    if args.verbose:
        config.verbose = True

    cli = StudentCLI(config)
    try:
        exit_code = cli.run(args)
    finally:
        cli.close()
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
