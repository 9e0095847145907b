"""
Middleware client speaking to TrueNAS through the ``midclt`` CLI.
"""
import json
from typing import Any, Dict, List, Optional

from ..core.interfaces.command_executor import ICommandExecutor
from ..core.interfaces.middleware_client import IMiddlewareClient
from ..core.exceptions.provisioning_exceptions import MiddlewareCallError


class MidcltClient(IMiddlewareClient):
    """``midclt call <method> <json args...>`` over the command executor."""
    
    def __init__(self, executor: ICommandExecutor, binary: str = "midclt"):
        self._executor = executor
        self._binary = binary
    
    async def query(self, method: str, filters: List[List[Any]],
                    options: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        args = [json.dumps(filters)]
        if options:
            args.append(json.dumps(options))
        result = await self.call(method, *args)
        if result is None:
            return []
        if not isinstance(result, list):
            raise MiddlewareCallError(method, 0, f"expected a list, got {type(result).__name__}")
        return result
    
    async def create_dataset(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        result = await self.call("pool.dataset.create", json.dumps(payload))
        return result if isinstance(result, dict) else {}
    
    async def set_acl(self, payload: Dict[str, Any]) -> Any:
        return await self.call("filesystem.setacl", json.dumps(payload), job=True)
    
    async def call(self, method: str, *args: str, job: bool = False) -> Any:
        """Invoke a middleware method and decode its JSON result."""
        command = ["call", "-j", method] if job else ["call", method]
        result = await self._executor.execute_system(self._binary, *command, *args)
        if not result.success:
            raise MiddlewareCallError(method, result.returncode, result.stderr)
        return self._decode(method, result.stdout)
    
    @staticmethod
    def _decode(method: str, stdout: str) -> Any:
        if not stdout:
            return None
        try:
            return json.loads(stdout)
        except json.JSONDecodeError:
            # Jobs print progress lines before the result.
            last_line = stdout.splitlines()[-1]
            try:
                return json.loads(last_line)
            except json.JSONDecodeError:
                raise MiddlewareCallError(method, 0, f"unparseable output: {last_line[:200]}")
