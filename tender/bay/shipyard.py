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

"""Module for handling container images"""

import asyncio
from collections import OrderedDict

from tender.common.constants import DockerConst
from tender.common.errors import EngineError, PullFailure
from tender.common.logging import Logged


class ImageSpec(object):
    
    def __init__(self, repo: str, tag: str = None):
        
        assert repo, ValueError("Image repository must not be empty")
        self.repo = repo
        self.tag = tag or DockerConst.LATEST
    
    @property
    def target(self):
        
        return '{}:{}'.format(self.repo, self.tag)
    
    def __repr__(self):
        
        return self.target
    
    def __eq__(self, other):
        
        return isinstance(other, ImageSpec) and self.target == other.target


class ImagePuller(Logged):
    
    """Fetches one image per declared service, concurrently
    
    Each pull is started as soon as its service is declared and its task handle is kept
    until join, which is called before any container is started.
    """
    
    def __init__(self, captain, log=None):
        
        Logged.__init__(self, log=log)
        self.captain = captain
        self.tasks = OrderedDict()
    
    def schedule(self, instance):
        
        assert instance.name not in self.tasks
        loop = asyncio.get_running_loop()
        self.tasks[instance.name] = loop.create_task(self._pull(instance))
    
    async def _pull(self, instance):
        
        try:
            return await self.captain.pull(instance.image)
        except EngineError as e:
            raise PullFailure(instance.name, e.output or str(e)) from e
    
    async def join(self):
        
        results = await asyncio.gather(*self.tasks.values(), return_exceptions=True)
        
        for name, result in zip(self.tasks.keys(), results):
            if isinstance(result, PullFailure):
                raise result
            elif isinstance(result, BaseException):
                raise PullFailure(name, str(result) or result.__class__.__name__) from result
        
        self.LOG.debug("All {} image(s) are available".format(len(results)))
    
    async def drain(self):
        
        """Cancels pending pulls and waits for every pull task to settle"""
        
        for task in self.tasks.values():
            if not task.done():
                task.cancel()
        
        await asyncio.gather(*self.tasks.values(), return_exceptions=True)
