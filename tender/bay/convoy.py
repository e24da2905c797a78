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

"""Orchestration of a whole run: services up, command launched, services down"""

import asyncio
import os
from typing import List

from tender.bay.expedition import Expedition
from tender.bay.manifest import Manifest
from tender.bay.warehouse import Warehouse
from tender.common.errors import MisusageError
from tender.common.logging import Logged
from tender.common.utils import exit_code


class Convoy(Logged):
    
    """Carries the services of a manifest through a single run
    
    Images are pulled before any container starts. Containers start concurrently and
    the first failure (in declaration order) aborts the run. The command is launched
    only after every service went through its setup callback. Every container that
    was started gets stopped exactly once, however the run ends.
    """
    
    CHILD_STOP_TIMEOUT = 10  # seconds
    
    def __init__(self, manifest: Manifest, captain, warehouse: Warehouse = None,
                 project: str = None, store: str = None, log=None):
        
        Logged.__init__(self, log=log)
        self.manifest = manifest
        self.captain = captain
        self.warehouse = warehouse
        self.project = project
        self.store = store
        self.expeditions: List[Expedition] = []
        self.child = None
        self.torn_down = False
    
    @property
    def persistent(self):
        
        return self.warehouse is not None and self.store is not None
    
    async def voyage(self, cmd: List[str], base_env: dict = None) -> int:
        
        assert len(cmd) > 0, MisusageError("A command is required")
        
        try:
            if self.manifest.puller is not None:
                await self.manifest.puller.join()
            
            self.prepare_store()
            self.expeditions = [
                Expedition(
                    instance=instance,
                    index=index,
                    captain=self.captain,
                    on_ready=self.persist if self.persistent else None,
                    log=self.LOG
                )
                for index, instance in enumerate(self.manifest.instances)
            ]
            
            await self.launch_all()
            return await self.sail(cmd, self.compose_env(base_env))
        finally:
            if self.manifest.puller is not None:
                await self.manifest.puller.drain()
            
            await self.teardown()
    
    def prepare_store(self):
        
        if not self.persistent:
            return
        
        for instance in self.manifest.instances:
            instance.spec.store_prefix = self.warehouse.make_prefix(self.project, self.store, instance.name)
            record = self.warehouse.load(self.project, self.store, instance.name)
            
            if record is not None:
                self.LOG.debug("Reusing settings of service '{}' from store '{}'".format(instance.name, self.store))
                instance.spec.load(record)
    
    def persist(self, instance):
        
        self.warehouse.save(self.project, self.store, instance.name, instance.spec.save())
    
    async def launch_all(self):
        
        if len(self.expeditions) == 0:
            return
        
        loop = asyncio.get_running_loop()
        tasks = [loop.create_task(exp.launch()) for exp in self.expeditions]
        
        try:
            _, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        except asyncio.CancelledError:
            pending = [task for task in tasks if not task.done()]
            await self.abort(pending)
            raise
        
        await self.abort(pending)
        errors = [task.exception() for task in tasks if not task.cancelled() and task.exception() is not None]
        
        if len(errors) == 0:
            return
        
        for error in errors[1:]:
            self.LOG.warn("Also failed: {}".format(error))
        
        self.LOG.warn("Aborting run: {}".format(errors[0]))
        raise errors[0]
    
    async def abort(self, pending):
        
        for task in pending:
            task.cancel()
        
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
    
    def compose_env(self, base_env: dict = None):
        
        env = dict(os.environ if base_env is None else base_env)
        
        for instance in self.manifest.instances:
            env.update(instance.env)
        
        return env
    
    async def sail(self, cmd: List[str], env: dict) -> int:
        
        self.LOG.info("All {} service(s) are running. Launching: {}".format(len(self.expeditions), ' '.join(cmd)))
        
        try:
            self.child = child = await asyncio.create_subprocess_exec(*cmd, env=env)
        except OSError as e:
            raise MisusageError("Could not launch command '{}'".format(cmd[0])) from e
        
        try:
            returncode = await child.wait()
        except asyncio.CancelledError:
            await self.stop_child(child)
            raise
        
        code = exit_code(returncode)
        self.LOG.info("Command exited with code {}".format(code))
        return code
    
    async def stop_child(self, child):
        
        if child.returncode is not None:
            return
        
        self.LOG.info("Stopping command")
        
        try:
            child.terminate()
        except ProcessLookupError:
            return
        
        try:
            await asyncio.wait_for(child.wait(), timeout=self.CHILD_STOP_TIMEOUT)
        except asyncio.TimeoutError:
            self.LOG.warn("Command did not stop after {} seconds. Killing it".format(self.CHILD_STOP_TIMEOUT))
            child.kill()
            await child.wait()
    
    async def teardown(self):
        
        if self.torn_down:
            return
        
        self.torn_down = True
        results = await asyncio.gather(
            *[exp.close() for exp in reversed(self.expeditions)],
            return_exceptions=True
        )
        
        for exp, result in zip(reversed(self.expeditions), results):
            if isinstance(result, Exception):
                self.LOG.warn("Could not stop service '{}': {}".format(exp.name, result))
