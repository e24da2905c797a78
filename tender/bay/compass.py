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

"""
This module helps with configuration resolutions

Each compass wraps one namespace of the layered configuration and resolves
defaults, paths and validation for the component that reads it.
"""

import os

from tender.common.annotations import Configured
from tender.common.conf import LazyConf, EngineConf, LoggerConf, StoreConf, DeclarationConf
from tender.common.constants import DockerConst, LoggerConst, StoreConst, DeclarationConst, Encoding
from tender.common.errors import ConfigurationError
from tender.common.parser import resolve_log_level


class Compass(Configured):
    
    conf: LazyConf = None
    
    def __init__(self, custom_conf: dict = None):
        
        self.conf.get('')  # triggering conf load
        
        if custom_conf is not None:
            self.conf = self.conf.load().as_dict().copy()
            self.conf.update(custom_conf)


class EngineCompass(Compass):
    
    conf = EngineConf
    
    KEY_BINARY = 'binary'
    KEY_PULL_POLICY = 'pull_policy'
    KEY_STOP_TIMEOUT = 'stop_timeout'
    KEY_NETWORK = 'network'
    DEFAULT_STOP_TIMEOUT = 10
    
    @property
    def binary(self):
        
        return self.conf.get(self.KEY_BINARY) or DockerConst.DEFAULT_BINARY
    
    @property
    def pull_policy(self):
        
        policy = self.conf.get(self.KEY_PULL_POLICY) or DockerConst.PullPolicy.MISSING
        
        assert policy in DockerConst.PullPolicy.ALL, ConfigurationError(
            "Unrecognized pull policy '{}'. Options are: {}".format(policy, DockerConst.PullPolicy.ALL)
        )
        
        return policy
    
    @property
    def stop_timeout(self):
        
        timeout = self.conf.get(self.KEY_STOP_TIMEOUT)
        return self.DEFAULT_STOP_TIMEOUT if timeout is None else int(timeout)
    
    @property
    def network(self):
        
        return self.conf.get(self.KEY_NETWORK)
    


class LoggerCompass(Compass):
    
    conf = LoggerConf
    
    KEY_NAME = 'name'
    KEY_LVL = 'level'
    KEY_DIR = 'directory'
    KEY_MAX_BYTES = 'max_bytes'
    KEY_BKP_COUNT = 'bkp_count'
    
    @property
    def name(self):
        
        return self.conf.get(self.KEY_NAME, LoggerConst.DEFAULT_NAME)
    
    @property
    def lvl(self):
        
        return resolve_log_level(self.conf.get(self.KEY_LVL) or 'INFO')
    
    @property
    def max_bytes(self):
        
        return self.conf[self.KEY_MAX_BYTES]
    
    @property
    def bkp_count(self):
        
        return self.conf[self.KEY_BKP_COUNT]
    
    @property
    def log_file_dir(self):
        
        return os.path.expanduser(self.conf.get(self.KEY_DIR) or LoggerConst.DEFAULT_DIR)
    
    @property
    def container_log_dir(self):
        
        return os.path.join(self.log_file_dir, LoggerConst.CONTAINER_SUBDIR)
    
    @property
    def log_file_name(self):
        
        return '{}.{}'.format(self.name, LoggerConst.FILE_EXT)
    
    @property
    def path_to_log_file(self):
        
        return os.path.join(self.log_file_dir, self.log_file_name)
    
    @property
    def file_handler_kwargs(self):
        
        return dict(
            filename=self.path_to_log_file,
            maxBytes=self.max_bytes,
            backupCount=self.bkp_count,
            encoding=Encoding.UTF_8
        )


class StoreCompass(Compass):
    
    conf = StoreConf
    
    KEY_DIR = 'directory'
    
    @property
    def directory(self):
        
        return os.path.expanduser(self.conf.get(self.KEY_DIR) or StoreConst.DEFAULT_DIR)


class DeclarationCompass(Compass):
    
    conf = DeclarationConf
    
    KEY_FILE = 'file'
    
    @property
    def file(self):
        
        return self.conf.get(self.KEY_FILE) or DeclarationConst.DEFAULT_FILE
