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

import pytest

from tender.bay.manifest import Manifest
from tender.bay.warehouse import Warehouse
from tender.common.errors import ProjectNotConfigured, StoreNotConfigured


def test_save_and_load(warehouse):
    
    path = warehouse.save('demo', 'dev', 'postgres', {'port': 5432, 'password': 'pw'})
    
    assert path.endswith(os.path.join('demo', 'dev', 'postgres.json'))
    assert warehouse.load('demo', 'dev', 'postgres') == {'port': '5432', 'password': 'pw'}


def test_save_overwrites(warehouse):
    
    warehouse.save('demo', 'dev', 'redis', {'port': 1})
    warehouse.save('demo', 'dev', 'redis', {'port': 2})
    assert warehouse.load('demo', 'dev', 'redis') == {'port': '2'}


def test_load_missing_record(warehouse):
    
    assert warehouse.load('demo', 'dev', 'postgres') is None


def test_list_stores(warehouse):
    
    assert warehouse.list_stores('demo') == []
    
    for store in ('staging', 'dev'):
        warehouse.save('demo', store, 'redis', {'port': 1})
    
    warehouse.save('other', 'prod', 'redis', {'port': 1})
    assert warehouse.list_stores('demo') == ['dev', 'staging']


@pytest.mark.asyncio
async def test_delete_cleans_up_the_volume(warehouse, captain, fake_island):
    
    instance = Manifest().service('fake')
    warehouse.save('demo', 'dev', instance.name, instance.spec.save())
    
    assert await warehouse.delete('demo', 'dev', instance, captain) is True
    assert captain.removed_volumes == [Warehouse.make_prefix('demo', 'dev', 'fake') + '-data']
    assert warehouse.load('demo', 'dev', instance.name) is None
    assert warehouse.list_stores('demo') == []


@pytest.mark.asyncio
async def test_delete_without_record(warehouse, captain, fake_island):
    
    instance = Manifest().service('fake')
    assert await warehouse.delete('demo', 'dev', instance, captain) is False
    assert captain.removed_volumes == []


def test_store_resolution():
    
    assert Warehouse.resolve('demo', 'dev') == ('demo', 'dev')
    
    with pytest.raises(ProjectNotConfigured):
        Warehouse.resolve(None, 'dev')
    
    with pytest.raises(StoreNotConfigured):
        Warehouse.resolve('demo', None)


def test_prefixes_of_lookalike_stores_differ():
    
    first = Warehouse.make_prefix('shop', 'dev-eu', 'pg')
    second = Warehouse.make_prefix('shop-dev', 'eu', 'pg')
    
    assert first != second
    assert first.startswith('tender-shop-dev-eu-pg-')
    assert Warehouse.make_prefix('shop', 'dev-eu', 'pg') == first
