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

import sys

import pytest

from tender.api.stack import StackAPI
from tender.bay.warehouse import Warehouse
from tender.common.errors import ProjectNotConfigured, ServiceNotYetRun, StoreNotConfigured, UnknownTool

TENDERFILE = """
def declare(manifest):
    manifest.project('demo', default_store='dev')
    manifest.service('fake', token='abc')
"""


@pytest.fixture
def tenderfile(tmp_path, fake_island):
    
    path = tmp_path / 'tenderfile.py'
    path.write_text(TENDERFILE)
    return str(path)


@pytest.fixture
def api(tenderfile, warehouse):
    
    return StackAPI(file=tenderfile, warehouse=warehouse)


def test_tool_before_any_run(api, captain):
    
    with pytest.raises(ServiceNotYetRun):
        api.tool('fake', 'show-token')
    
    assert captain.runs == {}


def test_show_before_any_run(api):
    
    assert api.show() == {"Store 'dev' of project 'demo'": {'fake': 'Not yet run'}}


@pytest.mark.asyncio
async def test_run_then_inspect_the_store(api, captain, warehouse):
    
    code = await api.run([sys.executable, '-c', 'pass'], captain=captain)
    
    assert code == 0
    assert api.stores() == ['dev']
    
    report = api.show()["Store 'dev' of project 'demo'"]
    assert report['fake']['token'] == 'abc'
    assert report['fake']['port'] == warehouse.load('demo', 'dev', 'fake')['port']
    
    assert api.tool('fake', 'show-token') == 0
    
    with pytest.raises(UnknownTool):
        api.tool('fake', 'psql')


@pytest.mark.asyncio
async def test_delete_store(api, captain, warehouse):
    
    await api.run([sys.executable, '-c', 'pass'], captain=captain, store='qa')
    assert api.stores() == ['qa']
    
    response = await api.delete(store='qa', captain=captain)
    
    assert response == {'Removed from store qa': ['fake']}
    assert captain.removed_volumes == [Warehouse.make_prefix('demo', 'qa', 'fake') + '-data']
    assert api.stores() == []


@pytest.mark.asyncio
async def test_run_without_store_keeps_nothing(tmp_path, fake_island, captain, warehouse):
    
    path = tmp_path / 'tenderfile.py'
    path.write_text("def declare(manifest):\n    manifest.service('fake')\n")
    api = StackAPI(file=str(path), warehouse=warehouse)
    
    assert await api.run([sys.executable, '-c', 'pass'], captain=captain) == 0
    assert '-v' not in list(captain.runs.values())[0]['opts']
    
    with pytest.raises(ProjectNotConfigured):
        api.stores()


@pytest.mark.asyncio
async def test_store_without_project_fails_before_any_container(tmp_path, fake_island, captain, warehouse):
    
    path = tmp_path / 'tenderfile.py'
    path.write_text("def declare(manifest):\n    manifest.service('fake')\n")
    api = StackAPI(file=str(path), warehouse=warehouse)
    
    with pytest.raises(ProjectNotConfigured):
        await api.run([sys.executable, '-c', 'pass'], store='dev', captain=captain)
    
    assert captain.runs == {}


def test_store_is_required_for_inspection(tmp_path, fake_island, warehouse):
    
    path = tmp_path / 'tenderfile.py'
    path.write_text("def declare(manifest):\n    manifest.project('demo')\n    manifest.service('fake')\n")
    
    with pytest.raises(StoreNotConfigured):
        StackAPI(file=str(path), warehouse=warehouse).show()


@pytest.mark.asyncio
async def test_tool_killed_by_a_signal(api, captain, monkeypatch):
    
    await api.run([sys.executable, '-c', 'pass'], captain=captain)
    monkeypatch.setattr('tender.api.stack.subprocess.call', lambda argv, env=None: -9)
    
    assert api.tool('fake', 'show-token') == 137
