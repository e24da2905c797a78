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
from kaptan import Kaptan

from tender.common.annotations import Lazy
from tender.common.constants import Package, Config, HostUser
from tender.common.errors import ConfigurationError
from tender.common.parser import join_dicts


class ConfSource(object):
    
    PKG = Package.CONF  # default framework conf found inside the python package
    USER = HostUser.CONF  # conf stored in the user home directory
    LOCAL = Config.LOCAL  # project specific conf found in the working directory
    ALL = [PKG, USER, LOCAL]


class LazyConf(Lazy, dict):
    
    _DICT_METHODS = tuple(['get', 'update', 'keys', 'values', 'items',
                          '__repr__', '__str__', '__getitem__', '__contains__', '__iter__'])
    
    _LAZY_PROPERTIES = _DICT_METHODS
    
    def __init__(self, namespace=None, sources=None):
        
        super().__init__()
        sources = sources or ConfSource.ALL
        assert isinstance(sources, (list, tuple))
        self.sources = sources
        self.namespace = namespace
    
    def setup(self):
        
        self.load()
    
    def as_dict(self):
        
        return dict(**self)
    
    def load(self):
        
        default_conf, user_conf, local_conf = [
            None if not os.path.exists(src)
            else Kaptan(handler=Config.FMT).import_config(src)
            for src in self.sources
        ]
        
        assert default_conf is not None,\
            ConfigurationError("Default configuration not found at {}".format(self.sources[0]))
        
        conf_opts = [local_conf, user_conf, {}]  # if local conf was found, user conf is ignored
        child_conf = next(filter(lambda x: x is not None, conf_opts))
        
        super().clear()
        super().update(**join_dicts(
            default_conf.get(self.namespace, {}),
            child_conf.get(self.namespace, {}),
            allow_overwrite=True
        ))
        
        return self


EngineConf = LazyConf(namespace=Config.Namespace.ENGINE)
LoggerConf = LazyConf(namespace=Config.Namespace.LOGGER)
StoreConf = LazyConf(namespace=Config.Namespace.STORE)
DeclarationConf = LazyConf(namespace=Config.Namespace.DECLARATION)
