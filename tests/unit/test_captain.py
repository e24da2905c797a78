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

import os
import stat

import pytest

from tender.bay.captain import Captain
from tender.bay.expedition import Expedition
from tender.bay.manifest import Manifest
from tender.bay.shipyard import ImagePuller, ImageSpec
from tender.common.conf import EngineConf
from tender.common.constants import Task
from tender.common.errors import PullFailure, StartFailure

ENGINE_SCRIPT = """#!/bin/sh
echo "$*" >> {calls}
case "$1" in
  image) exit {image_code} ;;
  pull) echo "Error response from daemon: pull access denied for $2"; exit {pull_code} ;;
  stop) echo "Error: No such container: $4" >&2; exit 1 ;;
esac
exit 0
"""


class EngineStub(object):
    
    """A shell script standing in for the engine's command line, logging every call"""
    
    def __init__(self, directory, image_code: int = 1, pull_code: int = 0):
        
        self.calls_path = os.path.join(str(directory), 'calls.txt')
        self.path = os.path.join(str(directory), 'engine')
        
        with open(self.path, 'w') as f:
            f.write(ENGINE_SCRIPT.format(calls=self.calls_path, image_code=image_code, pull_code=pull_code))
        
        os.chmod(self.path, os.stat(self.path).st_mode | stat.S_IEXEC)
    
    @property
    def calls(self):
        
        if not os.path.exists(self.calls_path):
            return []
        
        with open(self.calls_path) as f:
            return f.read().splitlines()


@pytest.fixture
def engine(tmp_path, monkeypatch):
    
    def factory(pull_policy='missing', **kwargs):
        
        stub = EngineStub(tmp_path, **kwargs)
        monkeypatch.setitem(EngineConf, 'binary', stub.path)
        monkeypatch.setitem(EngineConf, 'pull_policy', pull_policy)
        return stub
    
    return factory


@pytest.mark.asyncio
async def test_failing_stop_is_swallowed(engine):
    
    stub = engine()
    
    assert await Captain().stop('tender-1-0-postgres') is False
    assert stub.calls == ['stop -t 10 tender-1-0-postgres']


@pytest.mark.asyncio
async def test_pull_failure_carries_engine_output(engine):
    
    stub = engine(pull_code=1)
    manifest = Manifest(puller=ImagePuller(Captain()))
    manifest.service('redis')
    
    with pytest.raises(PullFailure) as e:
        await manifest.puller.join()
    
    assert e.value.service == 'redis'
    assert 'pull access denied for redis:7-alpine' in e.value.diagnostic
    assert 'pull redis:7-alpine' in stub.calls


@pytest.mark.asyncio
async def test_present_image_is_not_pulled_again(engine):
    
    stub = engine(image_code=0)
    
    assert await Captain().pull(ImageSpec('redis', '7-alpine')) is False
    assert stub.calls == ['image inspect redis:7-alpine']


@pytest.mark.asyncio
async def test_always_policy_pulls_present_image(engine):
    
    stub = engine(pull_policy='always', image_code=0)
    
    assert await Captain().pull(ImageSpec('redis', '7-alpine')) is True
    assert stub.calls == ['pull redis:7-alpine']


@pytest.mark.asyncio
async def test_engine_that_cannot_be_launched(tmp_path, monkeypatch, fake_island):
    
    monkeypatch.setitem(EngineConf, 'binary', str(tmp_path / 'no-such-engine'))
    exp = Expedition(Manifest().service('fake'), 0, Captain())
    
    with pytest.raises(StartFailure) as e:
        await exp.launch()
    
    assert e.value.service == 'fake'
    assert 'no-such-engine' in e.value.diagnostic
    assert exp.state == Task.State.START_FAILED
    
    assert await exp.close() is True
    assert exp.state == Task.State.STOPPED
