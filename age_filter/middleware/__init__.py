"""Age filtering middleware for package metadata requests."""

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, Protocol

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from ..exceptions import AgeFilterError
from ..logging import get_logger, log_downgrade, log_rejection
from ..selector import age_in_days, select_version
from ..types import PackageRecord, Policy, Reject, Rewrite

logger = get_logger(__name__)


class PackageSource(Protocol):
    """Anything that can look up a package document by name."""

    async def get_package(self, name: str) -> dict[str, Any]:
        ...


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_days(days: float) -> str:
    """Render a day count without a trailing ``.0`` for whole numbers."""
    return str(int(days)) if float(days).is_integer() else str(days)


def rejection_body(package: str, threshold_days: float) -> dict[str, str]:
    """Body of the 403 response sent when no version is old enough."""
    return {
        "error": "No acceptable version",
        "message": f"All versions of {package} are newer than {format_days(threshold_days)} days.",
    }


class AgeFilterMiddleware(BaseHTTPMiddleware):
    """Rewrite the latest dist-tag of packages whose latest release is too new.

    Only ``GET /<package>`` requests for unscoped packages are inspected.
    Scoped packages, tarballs and every other registry endpoint go straight
    to the next handler. When the package document cannot be fetched or
    evaluated, the request also goes to the next handler untouched.
    """

    def __init__(
        self,
        app,
        source: PackageSource,
        policy: Policy,
        bypass_paths: list[str] | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        super().__init__(app)
        self.source = source
        self.policy = policy
        self.bypass_paths = bypass_paths or ["/health"]
        self.clock = clock

    def _package_name(self, request: Request) -> str | None:
        """Return the package name if the request asks for unscoped package metadata."""
        if request.method != "GET" or request.url.path in self.bypass_paths:
            return None

        segments = request.url.path.strip("/").split("/")
        if len(segments) != 1 or not segments[0]:
            return None

        name = segments[0]
        # Scoped packages (including the %40-encoded form) and registry endpoints
        if name.startswith("@") or name.lower().startswith("%40") or name.startswith("-"):
            return None
        return name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Apply the age policy to package metadata responses."""
        package = self._package_name(request)
        if package is None:
            return await call_next(request)

        try:
            manifest = await self.source.get_package(package)
        except AgeFilterError as e:
            logger.debug("Could not check package age", package=package, error=str(e))
            return await call_next(request)

        record = PackageRecord.from_manifest(manifest, package)
        if record is None:
            logger.debug("Could not check package age", package=package, error="unusable metadata")
            return await call_next(request)

        decision = select_version(record, self.policy, self.clock())

        if isinstance(decision, Rewrite):
            log_downgrade(
                logger,
                package,
                decision.latest_version,
                decision.chosen_version,
                age_in_days(decision.latest_age),
                age_in_days(decision.chosen_age),
            )
            rewritten = dict(manifest)
            rewritten["dist-tags"] = {
                **manifest.get("dist-tags", {}),
                "latest": decision.chosen_version,
            }
            return JSONResponse(status_code=200, content=rewritten)

        if isinstance(decision, Reject):
            log_rejection(
                logger,
                package,
                decision.latest_version,
                age_in_days(decision.latest_age),
            )
            return JSONResponse(
                status_code=403,
                content=rejection_body(package, decision.threshold_days),
            )

        return await call_next(request)
