"""Directory API client: users, groups and group memberships."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Iterator, Optional, Sequence

from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from workspace_admin.apis.base import BaseAdminAPI
from workspace_admin.batch import BatchResult, run_batch
from workspace_admin.config import WorkspaceAdminConfig
from workspace_admin.credentials import DIRECTORY_SCOPES, build_credentials
from workspace_admin.errors import is_duplicate, is_not_found

logger = logging.getLogger("workspace_admin.directory")


class DirectoryAPI(BaseAdminAPI):
    API_NAME = "directory"

    def __init__(
        self,
        service: Any,
        config: WorkspaceAdminConfig,
        credentials: Any = None,
        customer_id: Optional[str] = None,
    ) -> None:
        super().__init__(service, config, credentials)
        self.customer_id = customer_id or config.customer_id

    @classmethod
    def from_config(cls, config: WorkspaceAdminConfig) -> "DirectoryAPI":
        """Authenticate as the configured admin and resolve the customer ID."""
        creds = build_credentials(config, DIRECTORY_SCOPES)
        service = build(
            "admin", "directory_v1", credentials=creds, cache_discovery=False
        )
        api = cls(service, config, credentials=creds)
        if not api.customer_id:
            api.customer_id = api.resolve_customer_id()
        logger.info(
            "DirectoryAPI ready: customer=%s admin=%s domain=%s",
            api.customer_id, api.admin_email, api.domain,
            extra={"api": cls.API_NAME},
        )
        return api

    def resolve_customer_id(self) -> str:
        response = self._execute(
            self.service.users().get(userKey=self.admin_email, fields="customerId"),
            f"users.get({self.admin_email})",
        )
        return response["customerId"]

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def iter_users(self, query: Optional[str] = None) -> Iterator[list[dict]]:
        """Yield users one page at a time."""
        users = self.service.users()
        request = users.list(
            domain=self.domain,
            query=query,
            maxResults=self.config.users_page_size,
            projection="full",
        )
        yield from self._paginate(request, users.list_next, "users", "users.list")

    def get_users(
        self,
        query: Optional[str] = None,
        on_page: Optional[Callable[[list[dict]], None]] = None,
    ) -> list[dict]:
        """Return every user matching ``query``.

        ``on_page`` is called with each page before the next one is fetched,
        so a caller can start processing while the listing continues.
        """
        user_list: list[dict] = []
        for page in self.iter_users(query):
            user_list.extend(page)
            if on_page is not None:
                on_page(page)
            logger.info(
                "Query %r returned %d users thus far", query or "", len(user_list),
                extra={"records": len(user_list)},
            )
        return user_list

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------

    def get_groups(self, query: Optional[str] = None) -> list[dict]:
        groups = self.service.groups()
        request = groups.list(
            domain=self.domain,
            query=query,
            maxResults=self.config.groups_page_size,
        )
        group_list: list[dict] = []
        for page in self._paginate(request, groups.list_next, "groups", "groups.list"):
            group_list.extend(page)
            logger.info(
                "Query %r returned %d groups thus far", query or "", len(group_list),
                extra={"records": len(group_list)},
            )
        return group_list

    def get_group_by_email(self, group_email: str) -> dict:
        return self._execute(
            self.service.groups().get(groupKey=group_email),
            f"groups.get({group_email})",
        )

    def get_groups_by_user(self, user_email: str) -> list[tuple[dict, dict]]:
        """Return (group, membership) pairs for every group ``user_email`` is in."""
        group_list = self.get_groups(f"memberKey={user_email}")
        pairs: list[tuple[dict, dict]] = []
        for counter, group in enumerate(group_list, start=1):
            member = self._execute(
                self.service.members().get(
                    groupKey=group["email"], memberKey=user_email
                ),
                f"members.get({group['email']}, {user_email})",
            )
            logger.debug(
                "(%s) group [%d] of [%d] {%s}: %s <%s>",
                user_email, counter, len(group_list), member.get("role"),
                group.get("name"), group["email"],
            )
            pairs.append((group, member))
        return pairs

    # ------------------------------------------------------------------
    # Members
    # ------------------------------------------------------------------

    def get_members(
        self, group_email: str, roles: Optional[Sequence[str]] = None
    ) -> list[dict]:
        """List members of ``group_email``, optionally filtered by role."""
        all_roles = ",".join(roles).upper() if roles else None
        logger.info(
            "Retrieving %s members from %s", all_roles or "all", group_email,
            extra={"group": group_email},
        )
        members = self.service.members()
        request = members.list(
            groupKey=group_email,
            roles=all_roles,
            maxResults=self.config.members_page_size,
        )
        member_list: list[dict] = []
        for page in self._paginate(
            request, members.list_next, "members", f"members.list({group_email})"
        ):
            member_list.extend(page)
        logger.info(
            "%s has %d members", group_email, len(member_list),
            extra={"group": group_email, "records": len(member_list)},
        )
        return member_list

    def push_member(self, group_email: str, member: dict) -> Optional[dict]:
        """Insert ``member`` into ``group_email``.

        Returns the created membership, or None when the member was
        already in the group.
        """
        email = member.get("email")
        try:
            result = self._execute(
                self.service.members().insert(groupKey=group_email, body=member),
                f"members.insert({group_email}, {email})",
            )
        except HttpError as exc:
            if is_duplicate(exc):
                logger.info(
                    "%s already in %s, skipping", email, group_email,
                    extra={"group": group_email, "member": email},
                )
                return None
            raise
        logger.info(
            "Insertion of %s into %s was successful", email, group_email,
            extra={"group": group_email, "member": email},
        )
        return result

    def push_member_by_email(
        self, group_email: str, user_email: str, role: str = "MEMBER"
    ) -> Optional[dict]:
        return self.push_member(
            group_email, {"email": user_email, "role": role.upper()}
        )

    def insert_members(
        self,
        members: Iterable[dict],
        group_email: str,
        max_workers: Optional[int] = None,
    ) -> BatchResult:
        """Insert many members concurrently. Duplicates count as skipped."""
        return run_batch(
            lambda member: self.push_member(group_email, member) is not None,
            members,
            max_workers or self.config.max_workers,
            label=f"insert_members:{group_email}",
        )

    def delete_member(self, group_email: str, member_email: str) -> bool:
        """Remove a member. Returns False if it was not in the group."""
        try:
            self._execute(
                self.service.members().delete(
                    groupKey=group_email, memberKey=member_email
                ),
                f"members.delete({group_email}, {member_email})",
            )
        except HttpError as exc:
            if is_not_found(exc):
                logger.info(
                    "%s not in %s, skipping", member_email, group_email,
                    extra={"group": group_email, "member": member_email},
                )
                return False
            raise
        logger.info(
            "Deletion of %s from %s was successful", member_email, group_email,
            extra={"group": group_email, "member": member_email},
        )
        return True

    def delete_members(
        self,
        member_emails: Iterable[str],
        group_email: str,
        max_workers: Optional[int] = None,
    ) -> BatchResult:
        """Remove many members concurrently. Absent members count as skipped."""
        return run_batch(
            lambda email: self.delete_member(group_email, email),
            member_emails,
            max_workers or self.config.max_workers,
            label=f"delete_members:{group_email}",
        )
