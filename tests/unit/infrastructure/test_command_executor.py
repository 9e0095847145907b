import os
import sys

import pytest

from app_datasets.provisioning.infrastructure.command_executor import CommandExecutor


class TestCommandExecutor:
    
    @pytest.mark.asyncio
    async def test_rejects_commands_outside_allowlist(self):
        result = await CommandExecutor().execute_system("rm", "-rf", "/")
        
        assert result.success is False
        assert "not allowed" in result.stderr
    
    @pytest.mark.asyncio
    async def test_runs_allowed_command(self):
        executor = CommandExecutor(allowed_commands={os.path.basename(sys.executable)})
        
        result = await executor.execute_system(sys.executable, "-c", "print('[1, 2]')")
        
        assert result.success is True
        assert result.returncode == 0
        assert result.stdout == "[1, 2]"
    
    @pytest.mark.asyncio
    async def test_captures_failure(self):
        executor = CommandExecutor(allowed_commands={os.path.basename(sys.executable)})
        
        result = await executor.execute_system(
            sys.executable, "-c", "import sys; sys.stderr.write('boom'); sys.exit(3)"
        )
        
        assert result.success is False
        assert result.returncode == 3
        assert result.stderr == "boom"
    
    @pytest.mark.asyncio
    async def test_timeout(self):
        executor = CommandExecutor(timeout=0.2, allowed_commands={os.path.basename(sys.executable)})
        
        result = await executor.execute_system(sys.executable, "-c", "import time; time.sleep(5)")
        
        assert result.returncode == 124
        assert "timed out" in result.stderr
    
    @pytest.mark.asyncio
    async def test_missing_binary(self):
        executor = CommandExecutor(allowed_commands={"midclt"})
        
        result = await executor.execute_system("/nonexistent/midclt", "call", "core.ping")
        
        assert result.returncode == 127
    
    def test_is_available(self):
        executor = CommandExecutor()
        
        assert executor.is_available(sys.executable) is True
        assert executor.is_available("definitely-not-a-real-binary-xyz") is False
