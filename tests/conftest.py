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

"""Shared fixtures: an isolated home directory, a fake container engine and a fake service"""

import os
import tempfile

os.environ['TENDER_HOME'] = tempfile.mkdtemp(prefix='tender-tests-')  # read by tender at import time

import asyncio
from collections import Counter, OrderedDict

import pytest

from tender.bay.island import ISLANDS, Island, register_island
from tender.bay.manifest import Manifest
from tender.bay.shipyard import ImagePuller
from tender.bay.warehouse import Warehouse
from tender.common.errors import EngineError
from tender.common.parser import assert_str_dict, join_dicts


class FakeProcess(object):
    
    """Stands for the engine process that keeps a container in the foreground"""
    
    def __init__(self, returncode: int = None):
        
        self.returncode = None
        self.exited = asyncio.Event()
        self.terminated = 0
        
        if returncode is not None:
            self.exit(returncode)
    
    async def wait(self):
        
        await self.exited.wait()
        return self.returncode
    
    def exit(self, code: int = 0):
        
        if self.returncode is None:
            self.returncode = code
        
        self.exited.set()
    
    def terminate(self):
        
        self.terminated += 1
        self.exit(-15)
    
    def kill(self):
        
        self.exit(-9)


class FakeCaptain(object):
    
    """Records every engine call instead of reaching a real container engine"""
    
    stop_timeout = 1
    
    def __init__(self, broken_images=(), crashing=()):
        
        self.broken_images = set(broken_images)
        self.crashing = dict(crashing)  # container name suffix -> (exit code, output)
        self.pulled = []
        self.runs = OrderedDict()
        self.stops = Counter()
        self.removed_volumes = []
    
    async def pull(self, img):
        
        await asyncio.sleep(0)
        
        if img.repo in self.broken_images:
            raise EngineError("Command 'docker pull' exited with code 1", output='manifest unknown')
        
        self.pulled.append(img.target)
        return True
    
    async def run(self, img, name, opts, cmd, log_path):
        
        for suffix, (code, output) in self.crashing.items():
            if name.endswith(suffix):
                with open(log_path, 'w') as f:
                    f.write(output)
                
                proc = FakeProcess(returncode=code)
                break
        else:
            proc = FakeProcess()
        
        self.runs[name] = dict(image=img.target, opts=list(opts), cmd=list(cmd), proc=proc)
        return proc
    
    async def execute(self, name, cmd):
        
        return 0, ''
    
    async def stop(self, name):
        
        self.stops[name] += 1
        
        if name in self.runs:
            self.runs[name]['proc'].exit(0)
        
        return True
    
    async def rm_vol(self, name, ignore=False):
        
        self.removed_volumes.append(name)
        return True
    
    def started(self, service_name):
        
        return [name for name in self.runs if name.endswith('-' + service_name)]


class FakeIsland(Island):
    
    alias = 'fake'
    repository = 'tender/fake'
    default_tag = '1.0'
    tools = ('show-token',)
    
    ORIGINAL_PORT = 7000
    DATA_DIR = '/data'
    DEFAULTS = {
        'token': None,
        'fail_probe': False,
        'probe_delay': 0
    }
    READY_DELAY = 0.01
    
    def __init__(self, **kwargs):
        
        super().__init__(**kwargs)
        self.token = self.options['token'] or 'secret-{}'.format(id(self))
    
    async def probe(self, captain, container_name):
        
        await asyncio.sleep(self.options['probe_delay'])
        
        if self.options['fail_probe']:
            raise RuntimeError('connection refused')
        
        return True
    
    def service_data(self):
        
        return assert_str_dict(OrderedDict(host=self.host, port=self.host_port, token=self.token))
    
    def make_record(self):
        
        return join_dicts(super().make_record(), dict(token=self.token))
    
    def load_record(self, record):
        
        self.token = record.get('token', self.token)
    
    def make_show_token_cmd(self):
        
        return ['echo', self.token]


@pytest.fixture
def fake_island():
    
    register_island(FakeIsland.alias, FakeIsland)
    yield FakeIsland
    ISLANDS.pop(FakeIsland.alias, None)


@pytest.fixture
def captain():
    
    return FakeCaptain()


@pytest.fixture
def warehouse(tmp_path):
    
    return Warehouse(directory=str(tmp_path / 'stores'))


@pytest.fixture
def make_manifest(fake_island):
    
    """Builds a manifest whose pulls go to the given captain. Must be called inside a running loop"""
    
    def factory(captain, declare):
        
        manifest = Manifest(puller=ImagePuller(captain))
        declare(manifest)
        return manifest.close()
    
    return factory


@pytest.fixture
def captain_factory():
    
    return FakeCaptain
