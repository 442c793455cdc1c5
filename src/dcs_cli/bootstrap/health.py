"""Health verification for the setup command.

Each service is polled with bounded attempts, exponential backoff and an
overall deadline until its health signal shows up. A failing service never
stops the others from being checked; its recent logs are collected as a
diagnostic instead.
"""

from __future__ import annotations

import asyncio
import subprocess
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

import httpx

from ..config import StackConfig
from ..errors import StackError
from ..shared.logging import get_logger
from .ports import DEFAULT_PORTS, PortAssignment
from .stack import StackManager

logger = get_logger(__name__)

# (healthy, error) for a single attempt
CheckOutcome = tuple[bool, str | None]
Check = Callable[[], Awaitable[CheckOutcome]]

GIT_SERVER_HEALTH_URL = "http://localhost:80/api/v0/health"
STREAMER_READY_MARKER = "started"
TLS_ERROR_MARKER = "could not get certificate from issuer"
LOG_TAIL_LINES = 100

DOMAIN_HINTS = [
    "DNS not configured for the domain",
    "SSL/TLS not set up",
    "Caddy reverse proxy not configured correctly",
]


@dataclass
class HealthCheckResult:
    """Result of polling one health signal."""

    healthy: bool
    attempts: int = 0
    elapsed_seconds: float = 0.0
    error: str | None = None


class HealthPoller:
    """Poll a check until it passes, attempts run out, or the deadline hits."""

    def __init__(
        self,
        max_attempts: int = 10,
        interval_seconds: float = 1.0,
        backoff: float = 2.0,
        max_interval_seconds: float = 8.0,
        deadline_seconds: float = 60.0,
        timeout_seconds: float = 5.0,
    ):
        """Initialize health poller.

        Args:
            max_attempts: Maximum number of attempts.
            interval_seconds: Wait after the first failed attempt.
            backoff: Multiplier applied to the wait after each failure.
            max_interval_seconds: Upper bound for a single wait.
            deadline_seconds: Time budget for one poll; ServiceProber.verify
                spreads it over all services.
            timeout_seconds: Timeout for each HTTP request or command.
        """
        self.max_attempts = max_attempts
        self.interval_seconds = interval_seconds
        self.backoff = backoff
        self.max_interval_seconds = max_interval_seconds
        self.deadline_seconds = deadline_seconds
        self.timeout_seconds = timeout_seconds

    def delay_for(self, attempt: int) -> float:
        """Wait before attempt `attempt + 1`."""
        return min(self.interval_seconds * self.backoff ** (attempt - 1), self.max_interval_seconds)

    async def poll(self, check: Check, deadline_seconds: float | None = None) -> HealthCheckResult:
        """Run `check` until it reports healthy or the budget is spent.

        The first attempt always runs, even with no time left.
        """
        deadline = self.deadline_seconds if deadline_seconds is None else deadline_seconds
        start = time.monotonic()
        last_error: str | None = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                healthy, last_error = await check()
            except Exception as e:  # a broken probe is an unhealthy attempt
                healthy, last_error = False, str(e)

            elapsed = time.monotonic() - start
            if healthy:
                return HealthCheckResult(healthy=True, attempts=attempt, elapsed_seconds=elapsed)

            remaining = deadline - elapsed
            if attempt == self.max_attempts or remaining <= 0:
                break
            await asyncio.sleep(min(self.delay_for(attempt), remaining))

        return HealthCheckResult(
            healthy=False,
            attempts=attempt,
            elapsed_seconds=time.monotonic() - start,
            error=last_error or "not healthy before timeout",
        )

    async def http_check(self, url: str) -> CheckOutcome:
        """One GET against a health URL; any 2xx is healthy."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.get(url)
        except httpx.ConnectError:
            return False, "Connection refused"
        except httpx.TimeoutException:
            return False, "Request timeout"
        except httpx.HTTPError as e:
            return False, str(e)

        if response.is_success:
            return True, None
        return False, f"HTTP {response.status_code}"


@dataclass
class ServiceCheck:
    """Verification outcome for one service."""

    service: str
    result: HealthCheckResult
    logs: str | None = None
    logs_error: str | None = None
    warnings: list[str] = field(default_factory=list)
    tls_expected: bool = False

    @property
    def healthy(self) -> bool:
        return self.result.healthy


@dataclass
class VerificationReport:
    """Outcome of verifying the whole stack."""

    checks: list[ServiceCheck] = field(default_factory=list)

    @property
    def all_healthy(self) -> bool:
        return all(check.healthy for check in self.checks)

    @property
    def failed(self) -> list[str]:
        return [check.service for check in self.checks if not check.healthy]


class ServiceProber:
    """Probe each service of the local stack."""

    def __init__(
        self,
        stack: StackManager,
        config: StackConfig,
        ports: PortAssignment,
        poller: HealthPoller | None = None,
    ):
        self.stack = stack
        self.config = config
        self.ports = ports
        self.poller = poller or HealthPoller()

    @property
    def backend_url(self) -> str:
        return f"http://localhost:{self.ports.get('backend', DEFAULT_PORTS['backend'])}/health"

    @property
    def domain_url(self) -> str:
        return f"https://{self.config.backend_domain}/health"

    async def _exec_check(self, service: str, command: list[str], expected: str) -> CheckOutcome:
        try:
            result = await asyncio.to_thread(
                self.stack.exec, service, command, self.poller.timeout_seconds
            )
        except (FileNotFoundError, subprocess.TimeoutExpired) as e:
            return False, str(e)
        if result.returncode == 0 and expected in result.stdout:
            return True, None
        return False, (result.stderr or result.stdout).strip() or f"exit code {result.returncode}"

    async def _logs_check(self, service: str, marker: str) -> CheckOutcome:
        try:
            logs = await asyncio.to_thread(self.stack.logs, service, None, self.poller.timeout_seconds)
        except StackError as e:
            return False, e.message
        if marker in logs:
            return True, None
        return False, f"'{marker}' not found in {service} logs"

    def checks(self) -> dict[str, Check]:
        """The probe for each service, in report order."""
        return {
            "backend": lambda: self.poller.http_check(self.backend_url),
            "git-server": lambda: self.poller.http_check(GIT_SERVER_HEALTH_URL),
            "log-streamer": lambda: self._logs_check("log-streamer", STREAMER_READY_MARKER),
            "redis": lambda: self._exec_check(
                "redis", ["redis-cli", "-a", self.config.redis_password, "ping"], "PONG"
            ),
            "mongodb": lambda: self._exec_check(
                "mongodb", ["mongosh", "--quiet", "--eval", "db.adminCommand('ping').ok"], "1"
            ),
        }

    async def check_domain(self) -> HealthCheckResult:
        """Single attempt against the public backend domain."""
        start = time.monotonic()
        healthy, error = await self.poller.http_check(self.domain_url)
        return HealthCheckResult(
            healthy=healthy, attempts=1, elapsed_seconds=time.monotonic() - start, error=error
        )

    async def probe(self, service: str, deadline_seconds: float | None = None) -> ServiceCheck:
        """Poll one service and collect diagnostics if it never came up."""
        result = await self.poller.poll(self.checks()[service], deadline_seconds)
        check = ServiceCheck(service=service, result=result)
        logger.info("service_probed", service=service, healthy=result.healthy, attempts=result.attempts)

        if result.healthy:
            if service == "backend":
                domain = await self.check_domain()
                if not domain.healthy:
                    check.warnings.append(f"Domain configuration is not working ({domain.error})")
            return check

        await self._collect_logs(check)
        return check

    async def _collect_logs(self, check: ServiceCheck) -> None:
        """Fetch recent logs; failures are recorded, never raised."""
        try:
            check.logs = await asyncio.to_thread(self.stack.logs, check.service, LOG_TAIL_LINES)
        except StackError as e:
            check.logs_error = e.message
            return
        if check.service == "git-server" and TLS_ERROR_MARKER in check.logs:
            check.tls_expected = True

    async def verify(
        self,
        services: list[str] | None = None,
        on_result: Callable[[ServiceCheck], None] | None = None,
    ) -> VerificationReport:
        """Probe every service in turn and report each result as it lands.

        The poller deadline is a budget for the whole run. Once it is spent
        each remaining service still gets a single attempt.
        """
        report = VerificationReport()
        start = time.monotonic()
        for service in services or list(self.checks()):
            remaining = max(self.poller.deadline_seconds - (time.monotonic() - start), 0.0)
            check = await self.probe(service, remaining)
            report.checks.append(check)
            if on_result:
                on_result(check)
        return report
