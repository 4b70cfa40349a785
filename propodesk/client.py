"""
Async API client for the Propodesk REST surface.

Wraps ``httpx.AsyncClient`` with a base URL and bearer token. Non-2xx
responses raise ApiError; nothing is retried.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, AsyncIterator, Optional

import httpx

from .config import COMMENT_POLL_INTERVAL_SECONDS
from .domain.comments.schemas import CommentOut
from .domain.comments.tree import organize_comments

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Raised for any non-2xx response"""

    def __init__(self, status_code: int, detail: Any):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"{status_code}: {detail}")


class PropodeskClient:
    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"), headers=headers, timeout=timeout, transport=transport
        )

    async def __aenter__(self) -> "PropodeskClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        response = await self._client.request(method, path, **kwargs)
        if response.is_success:
            if not response.content:
                return None
            if response.headers.get("content-type", "").startswith("application/json"):
                return response.json()
            return response.content
        try:
            detail = response.json().get("detail", response.text)
        except ValueError:
            detail = response.text
        raise ApiError(response.status_code, detail)

    # ------------------------------------------------------------------
    # Quotes
    # ------------------------------------------------------------------

    async def get_catalog(self) -> dict:
        return await self._request("GET", "/calculators/catalog")

    async def calculate_quote(self, selection: dict) -> dict:
        return await self._request("POST", "/calculators/quote", json=selection)

    # ------------------------------------------------------------------
    # Proposals
    # ------------------------------------------------------------------

    async def list_proposals(self, status: Optional[str] = None) -> list[dict]:
        params = {"status": status} if status else None
        return await self._request("GET", "/proposals", params=params)

    async def get_proposal(self, proposal_id: int) -> dict:
        return await self._request("GET", f"/proposals/{proposal_id}")

    async def create_proposal(self, data: dict) -> dict:
        return await self._request("POST", "/proposals", json=data)

    async def update_proposal(self, proposal_id: int, data: dict) -> dict:
        return await self._request("PATCH", f"/proposals/{proposal_id}", json=data)

    async def delete_proposal(self, proposal_id: int) -> dict:
        return await self._request("DELETE", f"/proposals/{proposal_id}")

    async def send_proposal(self, proposal_id: int, message: Optional[str] = None) -> dict:
        return await self._request("POST", f"/proposals/{proposal_id}/send", json={"message": message})

    async def accept_proposal(self, proposal_id: int, token: str, signer_name: Optional[str] = None) -> dict:
        body = {"token": token, "signer_name": signer_name}
        return await self._request("POST", f"/proposals/{proposal_id}/accept", json=body)

    async def reject_proposal(self, proposal_id: int, token: str) -> dict:
        return await self._request("POST", f"/proposals/{proposal_id}/reject", json={"token": token})

    async def save_version(self, proposal_id: int, label: Optional[str] = None) -> dict:
        return await self._request("POST", f"/proposals/{proposal_id}/versions", json={"label": label})

    async def list_versions(self, proposal_id: int) -> list[dict]:
        return await self._request("GET", f"/proposals/{proposal_id}/versions")

    async def get_version(self, proposal_id: int, version_id: int) -> dict:
        return await self._request("GET", f"/proposals/{proposal_id}/versions/{version_id}")

    async def restore_version(self, proposal_id: int, version_id: int) -> dict:
        return await self._request("POST", f"/proposals/{proposal_id}/versions/{version_id}/restore")

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    async def list_comments(
        self,
        proposal_id: int,
        since: Optional[datetime] = None,
        block_id: Optional[str] = None,
    ) -> list[CommentOut]:
        """Flat comment list for a proposal"""
        params: dict[str, Any] = {}
        if since is not None:
            params["since"] = since.isoformat()
        if block_id is not None:
            params["block_id"] = block_id
        data = await self._request("GET", f"/proposals/{proposal_id}/comments", params=params)
        return [CommentOut.model_validate(item) for item in data["comments"]]

    async def add_comment(self, proposal_id: int, data: dict) -> CommentOut:
        created = await self._request("POST", f"/proposals/{proposal_id}/comments", json=data)
        return CommentOut.model_validate(created)

    async def resolve_comment(
        self, proposal_id: int, comment_id: int, is_resolved: Optional[bool] = None
    ) -> CommentOut:
        updated = await self._request(
            "POST",
            f"/proposals/{proposal_id}/comments/{comment_id}/resolve",
            json={"is_resolved": is_resolved},
        )
        return CommentOut.model_validate(updated)

    async def watch_comments(
        self,
        proposal_id: int,
        interval: float = COMMENT_POLL_INTERVAL_SECONDS,
        block_id: Optional[str] = None,
    ) -> AsyncIterator[list[CommentOut]]:
        """
        Poll a proposal's comments and yield the threaded view after each fetch.

        A failed poll is logged and skipped; the caller keeps whatever it
        last received. Stop by breaking out of the loop.
        """
        while True:
            try:
                comments = await self.list_comments(proposal_id)
            except (ApiError, httpx.HTTPError) as e:
                logger.warning(f"⚠️ Comment poll for proposal {proposal_id} failed: {e}")
            else:
                yield organize_comments(comments, block_id=block_id)
            await asyncio.sleep(interval)

    # ------------------------------------------------------------------
    # Links
    # ------------------------------------------------------------------

    async def create_link(self, data: dict) -> dict:
        return await self._request("POST", "/links", json=data)

    async def list_links(self, proposal_id: int) -> list[dict]:
        return await self._request("GET", f"/links/proposal/{proposal_id}")

    async def open_shared_proposal(self, token: str, password: Optional[str] = None) -> dict:
        params = {"password": password} if password else None
        return await self._request("GET", f"/links/share/{token}", params=params)

    # ------------------------------------------------------------------
    # Contracts
    # ------------------------------------------------------------------

    async def create_contract(self, data: dict) -> dict:
        return await self._request("POST", "/contracts", json=data)

    async def contract_from_proposal(self, proposal_id: int, data: Optional[dict] = None) -> dict:
        return await self._request("POST", f"/contracts/from-proposal/{proposal_id}", json=data or {})

    async def send_contract(self, contract_id: int) -> dict:
        return await self._request("POST", f"/contracts/{contract_id}/send")

    async def view_contract(self, token: str) -> dict:
        return await self._request("GET", f"/contracts/view/{token}")

    async def sign_contract(self, token: str, signer_name: str, signature_data: str, **extra) -> dict:
        body = {"signer_name": signer_name, "signature_data": signature_data, **extra}
        return await self._request("POST", f"/contracts/sign/{token}", json=body)

    # ------------------------------------------------------------------
    # Invoices
    # ------------------------------------------------------------------

    async def create_invoice(self, data: dict) -> dict:
        return await self._request("POST", "/invoices", json=data)

    async def invoices_from_proposal(self, proposal_id: int, milestones: int = 1) -> dict:
        return await self._request(
            "POST", f"/invoices/from-proposal/{proposal_id}", json={"milestones": milestones}
        )

    async def invoice_from_contract(self, contract_id: int) -> dict:
        return await self._request("POST", f"/invoices/from-contract/{contract_id}")

    async def send_invoice(self, invoice_id: int) -> dict:
        return await self._request("POST", f"/invoices/{invoice_id}/send")

    async def set_invoice_status(self, invoice_id: int, status: str) -> dict:
        return await self._request("PATCH", f"/invoices/{invoice_id}/status", json={"status": status})
