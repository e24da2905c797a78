# -*- coding: utf-8 -*-

# Copyright Noronha Development Team
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Supervision of a single service container, from launch to teardown"""

import asyncio
import inspect
import os
from typing import Callable

from tender.common.constants import DockerConst, LoggerConst, Task
from tender.common.errors import EngineError, MisusageError, ReadinessFailure, SetupFailure, StartFailure
from tender.common.logging import Logged
from tender.common.parser import tail_lines, volume_safe


class Expedition(Logged):
    
    """Owns one container run: a process handle, a container name and a readiness signal
    
    The run goes through pending, starting, awaiting_readiness, ready, setting_up and
    running, in this order. Any failure moves it to the matching error state and raises.
    Teardown moves it to stopped and happens at most once.
    """
    
    State = Task.State
    
    def __init__(self, instance, index: int, captain, on_ready: Callable = None, log=None):
        
        Logged.__init__(self, log=log)
        self.instance = instance
        self.index = index
        self.captain = captain
        self.on_ready = on_ready
        self.state = self.State.PENDING
        self.history = [self.state]
        self.proc = None
        self.log_path = None
        self.closed = False
    
    @property
    def name(self):
        
        return self.instance.name
    
    @property
    def container_name(self):
        
        return '{}-{}-{}-{}'.format(DockerConst.CONTAINER_PREFIX, os.getpid(), self.index, volume_safe(self.name))
    
    def transition(self, state: str):
        
        if state not in self.State.TRANSITIONS[self.state]:
            raise MisusageError(
                "Service '{}' cannot go from state '{}' to '{}'".format(self.name, self.state, state)
            )
        
        self.LOG.debug("Service '{}': {} -> {}".format(self.name, self.state, state))
        self.state = state
        self.history.append(state)
    
    async def launch(self):
        
        self.transition(self.State.STARTING)
        spec = self.instance.spec
        self.log_path = self.LOG.container_log_path(self.container_name)
        self.LOG.info("Starting service '{}' from image {}".format(self.name, self.instance.image))
        
        try:
            self.proc = await self.captain.run(
                img=self.instance.image,
                name=self.container_name,
                opts=spec.make_opts(),
                cmd=spec.make_cmd(),
                log_path=self.log_path
            )
        except EngineError as e:
            self.transition(self.State.START_FAILED)
            raise StartFailure(self.name, str(e)) from e
        
        self.transition(self.State.AWAITING_READINESS)
        await self.await_readiness()
        self.transition(self.State.READY)
        self.LOG.info("Service '{}' is ready".format(self.name))
        
        self.transition(self.State.SETTING_UP)
        await self.set_up()
        self.transition(self.State.RUNNING)
        return self
    
    async def await_readiness(self):
        
        ready = asyncio.ensure_future(self.instance.spec.wait_ready(self.captain, self.container_name))
        exited = asyncio.ensure_future(self.proc.wait())
        
        try:
            done, _ = await asyncio.wait({ready, exited}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (ready, exited):
                if not task.done():
                    task.cancel()
        
        if exited in done:
            self.transition(self.State.START_FAILED)
            
            if ready.done() and not ready.cancelled():
                ready.exception()  # retrieved, the exit takes precedence
            
            raise StartFailure(self.name, self.diagnose(exited.result()))
        
        error = ready.exception()
        
        if error is not None:
            self.transition(self.State.READINESS_FAILED)
            raise ReadinessFailure(self.name, '{}: {}'.format(error.__class__.__name__, error)) from error
    
    async def set_up(self):
        
        instance = self.instance
        instance.enter_setup()
        
        try:
            if instance.setup is not None:
                result = instance.setup(instance)
                
                if inspect.isawaitable(result):
                    await result
            
            if self.on_ready is not None:
                self.on_ready(instance)
        except Exception as e:
            self.transition(self.State.SETUP_FAILED)
            raise SetupFailure(self.name, '{}: {}'.format(e.__class__.__name__, e)) from e
        finally:
            instance.exit_setup()
    
    def diagnose(self, returncode: int):
        
        output = ''
        
        if self.log_path is not None and os.path.isfile(self.log_path):
            with open(self.log_path, 'rb') as f:
                output = tail_lines(f.read(), LoggerConst.TAIL_LINES)
        
        return 'Container exited with code {}. {}'.format(returncode, output).strip()
    
    async def close(self):
        
        if self.closed or self.state == self.State.PENDING:
            return False
        
        self.closed = True
        self.LOG.info("Stopping service '{}'".format(self.name))
        
        if self.proc is not None and self.proc.returncode is None:
            try:
                self.proc.terminate()
            except ProcessLookupError:
                pass
        
        await self.captain.stop(self.container_name)
        
        if self.proc is not None:
            try:
                await asyncio.wait_for(self.proc.wait(), timeout=self.captain.stop_timeout + 5)
            except asyncio.TimeoutError:
                self.LOG.warn("Killing engine process of service '{}'".format(self.name))
                self.proc.kill()
        
        self.transition(self.State.STOPPED)
        return True
