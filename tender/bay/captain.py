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

"""Module used to drive the container engine through its command line interface"""

import asyncio
from asyncio.subprocess import PIPE, STDOUT, DEVNULL
from typing import List

from tender.bay.compass import EngineCompass
from tender.bay.shipyard import ImageSpec
from tender.common.annotations import Configured
from tender.common.conf import EngineConf
from tender.common.constants import DockerConst
from tender.common.errors import EngineError
from tender.common.logging import Logged
from tender.common.parser import assert_str


class Captain(Configured, Logged):
    
    conf = EngineConf
    
    def __init__(self, log=None):
        
        Logged.__init__(self, log=log)
        self.compass = EngineCompass()
        self.binary = self.compass.binary
        self.pull_policy = self.compass.pull_policy
        self.stop_timeout = self.compass.stop_timeout
        self.network = self.compass.network
    
    async def spawn(self, args: List[str], stdout=PIPE):
        
        cmd = [self.binary] + list(args)
        self.LOG.debug("Calling: {}".format(' '.join(cmd)))
        
        try:
            return await asyncio.create_subprocess_exec(*cmd, stdin=DEVNULL, stdout=stdout, stderr=STDOUT)
        except OSError as e:
            raise EngineError(
                """Could not call the container engine '{}'. """
                """Assert that it's installed and that your user has the required permissions."""
                .format(self.binary)
            ) from e
    
    async def call(self, *args: str, ignore=False):
        
        proc = await self.spawn(list(args))
        
        try:
            out, _ = await proc.communicate()
        except asyncio.CancelledError:
            if proc.returncode is None:
                proc.kill()
            raise
        
        out = assert_str(out, allow_none=True)
        
        if proc.returncode != 0 and not ignore:
            raise EngineError(
                "Command '{} {}' exited with code {}".format(self.binary, args[0], proc.returncode),
                output=out
            )
        
        return proc.returncode, out
    
    async def image_exists(self, img: ImageSpec):
        
        code, _ = await self.call('image', 'inspect', img.target, ignore=True)
        return code == 0
    
    async def pull(self, img: ImageSpec):
        
        if self.pull_policy == DockerConst.PullPolicy.MISSING and await self.image_exists(img):
            self.LOG.debug("Image {} is available locally".format(img.target))
            return False
        
        self.LOG.info("Pulling image {}".format(img.target))
        await self.call('pull', img.target)
        return True
    
    async def run(self, img: ImageSpec, name: str, opts: List[str], cmd: List[str], log_path: str):
        
        """Starts a container in the foreground and returns the handle to the engine's process
        
        The container is removed by the engine as soon as it stops. Its output goes
        to the file in log_path, which is kept for diagnosing failed starts.
        """
        
        args = ['run', '--rm', '--name', name] + self.network_opts() + list(opts) + [img.target] + list(cmd)
        
        with open(log_path, 'ab') as log_file:
            return await self.spawn(args, stdout=log_file)
    
    async def execute(self, name: str, cmd: List[str]):
        
        return await self.call('exec', name, *cmd, ignore=True)
    
    async def stop(self, name: str):
        
        try:
            await self.call('stop', '-t', str(self.stop_timeout), name)
        except EngineError as e:
            self.LOG.debug("Stop command for container '{}' failed: {}".format(name, e.output.strip() or e))
            return False
        else:
            return True
    
    async def rm_vol(self, name: str, ignore=False):
        
        code, out = await self.call('volume', 'rm', '-f', name, ignore=ignore)
        
        if code != 0:
            self.LOG.warn("Could not remove volume '{}': {}".format(name, out.strip()))
            return False
        else:
            self.LOG.info("Removed volume '{}'".format(name))
            return True
    
    def network_opts(self):
        
        if self.network:
            return ['--network', self.network]
        else:
            return []
