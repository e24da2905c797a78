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

"""Service definitions (i.e.: islands)

An island knows how to launch one kind of backing service in a container, how to tell
when it's ready, which connection data it offers and which client tools can use it.
"""

import asyncio
import os
import secrets
from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import List, Type
from urllib.parse import quote

from tender.bay.shipyard import ImageSpec
from tender.common.constants import DockerConst, IslandConst
from tender.common.errors import ConfigurationError, UnknownService, UnknownTool
from tender.common.logging import Logged
from tender.common.parser import assert_str_dict, dict_to_kv_list, join_dicts, volume_safe
from tender.common.utils import find_free_port


class Island(ABC, Logged):
    
    alias: str = None
    repository: str = None
    default_tag: str = DockerConst.LATEST
    tools: tuple = ()
    
    ORIGINAL_PORT: int = None
    DATA_DIR: str = None  # path inside the container where persisted data lives
    DEFAULTS: dict = {}
    BASE_DEFAULTS = {
        'port': None,  # host port, chosen at random when not set
        'ready_timeout': None  # seconds. By default readiness is awaited for as long as the container lives
    }
    READY_DELAY = 0.2
    READY_MAX_DELAY = 2.0
    
    def __init__(self, log=None, **options):
        
        Logged.__init__(self, log=log)
        
        try:
            self.options = join_dicts(
                join_dicts(self.BASE_DEFAULTS, self.DEFAULTS),
                options,
                allow_new_keys=False
            )
        except KeyError as e:
            raise ConfigurationError(
                "Unsupported option for service '{}'. Options are: {}"
                .format(self.alias, sorted(join_dicts(self.BASE_DEFAULTS, self.DEFAULTS).keys()))
            ) from e
        
        self.store_prefix: str = None
        self.port = self.options['port']
    
    def image(self, tag: str = None):
        
        return ImageSpec(self.repository, tag or self.default_tag)
    
    @property
    def host(self):
        
        return DockerConst.LOCALHOST
    
    @property
    def host_port(self):
        
        if self.port is None:
            self.port = find_free_port()
        
        return int(self.port)
    
    @property
    def volume(self):
        
        if self.store_prefix is None or self.DATA_DIR is None:
            return None
        else:
            return volume_safe(self.store_prefix, 'data')
    
    def make_opts(self):
        
        opts = ['-p', '{}:{}:{}'.format(self.host, self.host_port, self.ORIGINAL_PORT)]
        
        for env_var in dict_to_kv_list(self.make_env_vars()):
            opts += ['-e', env_var]
        
        if self.volume is not None:
            opts += ['-v', '{}:{}'.format(self.volume, self.DATA_DIR)]
        
        return opts
    
    def make_env_vars(self):
        
        return {}
    
    def make_cmd(self):
        
        return []
    
    async def wait_ready(self, captain, container_name: str):
        
        delay, waited = self.READY_DELAY, 0.0
        timeout = self.options.get('ready_timeout')
        
        while not await self.probe(captain, container_name):
            if timeout is not None and waited >= timeout:
                raise TimeoutError("Service '{}' was not ready after {} seconds".format(self.alias, timeout))
            
            await asyncio.sleep(delay)
            waited += delay
            delay = min(delay * 1.5, self.READY_MAX_DELAY)
        
        self.LOG.debug("Container '{}' is ready".format(container_name))
    
    @abstractmethod
    async def probe(self, captain, container_name: str) -> bool:
        
        pass
    
    @abstractmethod
    def service_data(self) -> dict:
        
        pass
    
    def save(self):
        
        return assert_str_dict(self.make_record())
    
    def load(self, record: dict):
        
        record = dict(record)
        saved_port = record.pop('port', None)
        
        if self.options['port'] is not None:
            if saved_port and int(saved_port) != int(self.options['port']):
                self.LOG.warn(
                    "Service '{}' was saved with port {}. Using the declared port {} instead"
                    .format(self.alias, saved_port, self.options['port'])
                )
        elif saved_port:
            self.port = int(saved_port)
        
        self.load_record(record)
        return self
    
    def make_record(self):
        
        return OrderedDict(port=self.host_port)
    
    def load_record(self, record: dict):
        
        pass
    
    async def cleanup(self, captain):
        
        if self.volume is not None:
            await captain.rm_vol(self.volume, ignore=True)
    
    def tool_cmd(self, tool: str, args: List[str] = ()):
        
        if tool not in self.tools:
            raise UnknownTool(
                "Service '{}' offers no tool named '{}'. Options are: {}"
                .format(self.alias, tool, list(self.tools))
            )
        
        method = getattr(self, 'make_{}_cmd'.format(tool.replace('-', '_')))
        return method() + list(args)
    
    def tool_env(self):
        
        return dict(os.environ)


class PostgresIsland(Island):
    
    alias = IslandConst.POSTGRES
    repository = 'postgres'
    default_tag = '16-alpine'
    tools = ('psql', 'pg_dump')
    
    ORIGINAL_PORT = 5432
    DATA_DIR = '/var/lib/postgresql/data'
    DEFAULTS = {
        'user': 'postgres',
        'password': None,
        'database': 'postgres'
    }
    
    def __init__(self, **kwargs):
        
        super().__init__(**kwargs)
        self.user = self.options['user']
        self.password = self.options['password'] or secrets.token_hex(16)
        self.database = self.options['database']
    
    @property
    def url(self):
        
        return 'postgresql://{}:{}@{}:{}/{}'.format(
            quote(self.user, safe=''),
            quote(self.password, safe=''),
            self.host,
            self.host_port,
            quote(self.database, safe='')
        )
    
    def make_env_vars(self):
        
        return OrderedDict(
            POSTGRES_USER=self.user,
            POSTGRES_PASSWORD=self.password,
            POSTGRES_DB=self.database
        )
    
    async def probe(self, captain, container_name: str):
        
        # the entrypoint's temporary init server only listens on a unix socket
        code, _ = await captain.execute(container_name, [
            'pg_isready',
            '-h', DockerConst.LOCALHOST,
            '-p', str(self.ORIGINAL_PORT),
            '-U', self.user,
            '-d', self.database
        ])
        
        return code == 0
    
    def service_data(self):
        
        return assert_str_dict(OrderedDict(
            url=self.url,
            host=self.host,
            port=self.host_port,
            user=self.user,
            password=self.password,
            database=self.database
        ))
    
    def make_record(self):
        
        return join_dicts(super().make_record(), OrderedDict(
            user=self.user,
            password=self.password,
            database=self.database
        ))
    
    def load_record(self, record: dict):
        
        self.user = record.get('user', self.user)
        self.password = record.get('password', self.password)
        self.database = record.get('database', self.database)
    
    def make_psql_cmd(self):
        
        return ['psql', self.url]
    
    def make_pg_dump_cmd(self):
        
        return ['pg_dump', self.url]


class RedisIsland(Island):
    
    alias = IslandConst.REDIS
    repository = 'redis'
    default_tag = '7-alpine'
    tools = ('redis-cli',)
    
    ORIGINAL_PORT = 6379
    DATA_DIR = '/data'
    DEFAULTS = {
        'password': None
    }
    
    def __init__(self, **kwargs):
        
        super().__init__(**kwargs)
        self.password = self.options['password']
    
    @property
    def url(self):
        
        auth = ':{}@'.format(quote(self.password, safe='')) if self.password else ''
        return 'redis://{}{}:{}/0'.format(auth, self.host, self.host_port)
    
    def auth_args(self):
        
        return ['-a', self.password, '--no-auth-warning'] if self.password else []
    
    def make_cmd(self):
        
        cmd = ['redis-server']
        
        if self.volume is not None:
            cmd += ['--appendonly', 'yes']
        
        if self.password:
            cmd += ['--requirepass', self.password]
        
        return cmd
    
    async def probe(self, captain, container_name: str):
        
        code, out = await captain.execute(
            container_name,
            ['redis-cli', '-h', DockerConst.LOCALHOST] + self.auth_args() + ['ping']
        )
        
        return code == 0 and out.strip() == 'PONG'
    
    def service_data(self):
        
        return assert_str_dict(OrderedDict(
            url=self.url,
            host=self.host,
            port=self.host_port,
            password=self.password
        ))
    
    def make_record(self):
        
        return join_dicts(super().make_record(), OrderedDict(password=self.password or ''))
    
    def load_record(self, record: dict):
        
        self.password = record.get('password') or None
    
    def make_redis_cli_cmd(self):
        
        return ['redis-cli', '-h', self.host, '-p', str(self.host_port)] + self.auth_args()


ISLANDS = OrderedDict([
    (IslandConst.POSTGRES, PostgresIsland),
    (IslandConst.REDIS, RedisIsland)
])


def register_island(alias: str, isle_cls: Type[Island]):
    
    assert issubclass(isle_cls, Island), TypeError("Expected a subclass of Island. Got: {}".format(isle_cls))
    ISLANDS[alias] = isle_cls
    return isle_cls


def get_island(name: str, **kwargs) -> Island:
    
    try:
        isle_cls = ISLANDS[name]
    except KeyError:
        raise UnknownService(
            "Could not resolve service by reference '{}'. Options are: {}"
            .format(name, list(ISLANDS.keys()))
        )
    else:
        return isle_cls(**kwargs)
