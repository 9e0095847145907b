"""
Concrete implementation of command executor interface.
"""
import asyncio
import logging
import os
import shutil
from typing import Iterable, List, Optional
from ..core.interfaces.command_executor import ICommandExecutor, CommandResult


class CommandExecutor(ICommandExecutor):
    """Runs allow-listed commands as subprocesses, one at a time."""
    
    def __init__(self, timeout: Optional[float] = None, allowed_commands: Optional[Iterable[str]] = None):
        # No timeout by default: a hung middleware call hangs the tool.
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)
        self._allowed_system_commands = set(allowed_commands or {'midclt'})
    
    def is_available(self, command: str) -> bool:
        return shutil.which(command) is not None
    
    async def execute_system(self, command: str, *args: str) -> CommandResult:
        """Execute system command with validation."""
        if os.path.basename(command) not in self._allowed_system_commands:
            return CommandResult(
                success=False,
                returncode=1,
                stdout="",
                stderr=f"System command '{command}' not allowed"
            )
        
        full_command = [command] + list(args)
        return await self._execute_command(full_command)
    
    async def _execute_command(self, command: List[str]) -> CommandResult:
        """Execute command with proper error handling."""
        try:
            self.logger.debug(f"Executing command: {' '.join(command[:3])}")
            
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                limit=1024*1024  # 1MB limit
            )
            
            try:
                if self.timeout is None:
                    stdout, stderr = await process.communicate()
                else:
                    stdout, stderr = await asyncio.wait_for(
                        process.communicate(),
                        timeout=self.timeout
                    )
            except asyncio.TimeoutError:
                process.kill()
                await process.wait()
                return CommandResult(
                    success=False,
                    returncode=124,  # Timeout exit code
                    stdout="",
                    stderr=f"Command timed out after {self.timeout} seconds"
                )
            
            stdout_str = stdout.decode('utf-8', errors='replace').strip()
            stderr_str = stderr.decode('utf-8', errors='replace').strip()
            
            success = process.returncode == 0
            
            if not success:
                self.logger.debug(
                    f"Command failed with exit code {process.returncode}: {stderr_str}"
                )
            
            return CommandResult(
                success=success,
                returncode=process.returncode or 0,
                stdout=stdout_str,
                stderr=stderr_str
            )
            
        except OSError as e:
            self.logger.error(f"Command execution failed: {str(e)}")
            return CommandResult(
                success=False,
                returncode=127,
                stdout="",
                stderr=f"Command execution failed: {str(e)}"
            )
