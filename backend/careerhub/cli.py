"""
CareerHub admin console.

Keeps a durable session in ``settings.session_file`` when logged in with
--remember, so later invocations are already signed in.

Usage:
    careerhub login --email admin@example.com --password admin123 --remember
    careerhub whoami
    careerhub jobs list --active --page-size 20
    careerhub jobs show <job_id>
    careerhub jobs search python
    careerhub jobs delete <job_id>
    careerhub logout
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

from careerhub.auth import Authenticator, FileSessionStore, SessionManager, SessionStore
from careerhub.config import get_settings
from careerhub.exceptions import InvalidCredentialsError, InvalidCursorError, JobNotFoundError
from careerhub.guard import GuardDecision, evaluate_route
from careerhub.schemas import JobCategory, JobFilters, JobRecord, RequiredRole, Role, get_job_status
from careerhub.services.jobs import JobService
from careerhub.services.storage import ObjectStorage, get_storage
from careerhub.timeutils import format_date, relative_time


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="careerhub", description="CareerHub admin console")
    commands = parser.add_subparsers(dest="command", required=True)

    login = commands.add_parser("login", help="Sign in")
    login.add_argument("--email", required=True)
    login.add_argument("--password", required=True)
    login.add_argument("--role", choices=[role.value for role in Role])
    login.add_argument("--remember", action="store_true", help="Stay signed in")

    commands.add_parser("logout", help="Sign out and forget the stored session")
    commands.add_parser("whoami", help="Show the signed-in principal")

    jobs = commands.add_parser("jobs", help="Manage job postings")
    job_commands = jobs.add_subparsers(dest="job_command", required=True)

    listing = job_commands.add_parser("list", help="List jobs, newest first")
    status = listing.add_mutually_exclusive_group()
    status.add_argument("--active", action="store_true")
    status.add_argument("--expired", action="store_true")
    listing.add_argument("--category", choices=[category.value for category in JobCategory])
    listing.add_argument("--tag")
    listing.add_argument(
        "--page-size", type=positive_int, default=get_settings().default_page_size
    )
    listing.add_argument("--cursor")

    show = job_commands.add_parser("show", help="Show one job")
    show.add_argument("job_id")

    search = job_commands.add_parser("search", help="Search jobs by text")
    search.add_argument("text")

    delete = job_commands.add_parser("delete", help="Delete a job")
    delete.add_argument("job_id")

    return parser


def format_job_line(job: JobRecord) -> str:
    return (
        f"{job.id}  {job.title} @ {job.employer_name}  "
        f"[{get_job_status(job).value}]  posted {relative_time(job.posted_at)}"
    )


def require(session: SessionManager, required: RequiredRole) -> bool:
    decision = evaluate_route(session.principal, required)
    if decision == GuardDecision.REDIRECT_LOGIN:
        print("Not signed in. Run `careerhub login` first.", file=sys.stderr)
        return False
    if decision == GuardDecision.REDIRECT_HOME:
        print(f"This command requires the {required.value} role.", file=sys.stderr)
        return False
    return True


async def run_jobs_command(args: argparse.Namespace, jobs: JobService) -> int:
    if args.job_command == "list":
        filters = JobFilters(
            category=args.category,
            tag=args.tag,
            is_active=args.active,
            is_expired=args.expired,
        )
        try:
            page = await jobs.list_jobs(filters, args.page_size, args.cursor)
        except InvalidCursorError as e:
            print(str(e), file=sys.stderr)
            return 2
        for job in page.jobs:
            print(format_job_line(job))
        if page.has_more:
            print(f"\nNext page: --cursor {page.cursor}")
        return 0

    if args.job_command == "search":
        for job in await jobs.search_jobs(args.text):
            print(format_job_line(job))
        return 0

    if args.job_command == "show":
        try:
            job = await jobs.get_job(args.job_id)
        except JobNotFoundError as e:
            print(str(e), file=sys.stderr)
            return 1
        print(format_job_line(job))
        print(f"  {job.city}, {job.country}{' (remote)' if job.is_remote else ''}")
        print(f"  {job.salary_currency} {job.salary_min:,.0f} - {job.salary_max:,.0f}")
        print(f"  Expires {format_date(job.expiry_date)}")
        print(f"  {job.applications} applications, {job.job_views} views")
        return 0

    if args.job_command == "delete":
        await jobs.delete_job(args.job_id)
        print(f"Deleted {args.job_id}")
        return 0

    raise ValueError(f"Unknown jobs command: {args.job_command}")


async def run(
    args: argparse.Namespace,
    store: SessionStore,
    session_factory=None,
    storage: Optional[ObjectStorage] = None,
) -> int:
    """Execute one parsed command. Returns the process exit code."""
    if session_factory is None:
        from careerhub.database import async_session, init_db

        await init_db()
        session_factory = async_session

    async with session_factory() as db:
        session = SessionManager(store, Authenticator(db))

        if args.command == "login":
            role = Role(args.role) if args.role else None
            try:
                principal = await session.login(args.email, args.password, role, args.remember)
            except InvalidCredentialsError as e:
                print(str(e), file=sys.stderr)
                return 1
            print(f"Signed in as {principal.name} ({principal.role.value})")
            if not args.remember:
                print("Session not remembered; pass --remember to stay signed in.")
            return 0

        if args.command == "logout":
            session.logout()
            print("Signed out")
            return 0

        if args.command == "whoami":
            if session.principal is None:
                print("Not signed in")
                return 1
            print(f"{session.principal.name} <{session.principal.email}> ({session.principal.role.value})")
            return 0

        if args.command == "jobs":
            required = RequiredRole.ADMIN if args.job_command == "delete" else RequiredRole.ANY
            if not require(session, required):
                return 1
            return await run_jobs_command(args, JobService(db, storage or get_storage()))

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[list[str]] = None) -> int:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())
    args = build_parser().parse_args(argv)
    return asyncio.run(run(args, FileSessionStore(settings.session_file)))


if __name__ == "__main__":
    sys.exit(main())
