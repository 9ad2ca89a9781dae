"""Host probes backed by whichever system tool is available.

Each prober tries its backends in priority order and returns ``None`` when no
backend tool is installed, so callers can degrade to a warning.
"""

import re
from typing import Callable, List, Optional, Sequence

_IPV4_RE = re.compile(r"^\d+\.\d+\.\d+\.\d+$")


class ProbeBackend:
    tool = ""

    def __init__(self, run_cmd: Callable):
        self.run_cmd = run_cmd


class SsPortBackend(ProbeBackend):
    tool = "ss"

    def is_listening(self, port: int) -> bool:
        result = self.run_cmd(["ss", "-tlnp"], check=False, capture_output=True)
        return f":{port} " in (result.stdout or "")


class LsofPortBackend(ProbeBackend):
    tool = "lsof"

    def is_listening(self, port: int) -> bool:
        result = self.run_cmd(
            ["lsof", "-i", f":{port}", "-sTCP:LISTEN"],
            check=False,
            capture_output=True,
        )
        return result.returncode == 0


class DigBackend(ProbeBackend):
    tool = "dig"

    def resolves(self, domain: str) -> bool:
        result = self.run_cmd(["dig", "+short", domain], check=False, capture_output=True)
        return any(_IPV4_RE.match(line.strip()) for line in (result.stdout or "").splitlines())


class NslookupBackend(ProbeBackend):
    tool = "nslookup"

    def resolves(self, domain: str) -> bool:
        result = self.run_cmd(["nslookup", domain], check=False, capture_output=True)
        return result.returncode == 0


class _Prober:
    backend_classes: Sequence[type] = ()

    def __init__(self, run_cmd: Callable, which: Callable[[str], bool]):
        self.which = which
        self.backends: List[ProbeBackend] = [cls(run_cmd) for cls in self.backend_classes]

    @property
    def tools(self) -> List[str]:
        return [backend.tool for backend in self.backends]

    def available_backend(self) -> Optional[ProbeBackend]:
        for backend in self.backends:
            if self.which(backend.tool):
                return backend
        return None


class PortProber(_Prober):
    backend_classes = (SsPortBackend, LsofPortBackend)

    def is_in_use(self, port: int) -> Optional[bool]:
        backend = self.available_backend()
        if backend is None:
            return None
        return backend.is_listening(port)


class DnsResolver(_Prober):
    backend_classes = (DigBackend, NslookupBackend)

    def resolves(self, domain: str) -> Optional[bool]:
        backend = self.available_backend()
        if backend is None:
            return None
        return backend.resolves(domain)
