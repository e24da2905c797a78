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

"""Declaration of the services needed by a run (i.e.: the manifest)

A manifest is built once per command by the declaration file's 'declare' function.
It's only written to while declarations are being made. Afterwards, the run reads it.
"""

import os
import runpy
from collections import OrderedDict
from typing import Callable, List

from tender.bay.island import Island, get_island
from tender.bay.shipyard import ImagePuller, ImageSpec
from tender.common.constants import DeclarationConst
from tender.common.errors import ConfigurationError, NoActiveServiceContext, ResolutionError
from tender.common.logging import Logged
from tender.common.parser import assert_str


class ServiceInstance(object):
    
    def __init__(self, name: str, service_id: str, image: ImageSpec, spec: Island, setup: Callable = None):
        
        assert setup is None or callable(setup), TypeError("Setup callback must be callable")
        self.name = name
        self.service_id = service_id
        self.image = image
        self.spec = spec
        self.setup = setup
        self.env = OrderedDict()
        self._in_setup = False
    
    def __repr__(self):
        
        return "{}(name='{}', image='{}')".format(self.__class__.__name__, self.name, self.image)
    
    @property
    def data(self):
        
        return self.spec.service_data()
    
    def set_env(self, name: str, value):
        
        if not self._in_setup:
            raise NoActiveServiceContext(
                "Environment variable '{}' can only be set from the setup callback of service '{}'"
                .format(name, self.name)
            )
        
        self.env[assert_str(name, allow_empty=False)] = assert_str(value, allow_none=True)
    
    def enter_setup(self):
        
        self._in_setup = True
    
    def exit_setup(self):
        
        self._in_setup = False


class Manifest(Logged):
    
    def __init__(self, puller: ImagePuller = None, log=None):
        
        Logged.__init__(self, log=log)
        self.puller = puller
        self.instances: List[ServiceInstance] = []
        self.project_name: str = None
        self.default_store: str = None
        self.declared = False
    
    def project(self, name: str, default_store: str = None):
        
        assert not self.declared, ConfigurationError("Declarations are closed")
        self.project_name = assert_str(name, allow_empty=False)
        self.default_store = default_store
        return self
    
    def service(self, service_id: str, setup: Callable = None, tag: str = None, name: str = None, **options):
        
        assert not self.declared, ConfigurationError("Declarations are closed")
        spec = get_island(service_id, log=self.LOG, **options)
        
        instance = ServiceInstance(
            name=self.make_name(name or service_id),
            service_id=service_id,
            image=spec.image(tag),
            spec=spec,
            setup=setup
        )
        
        self.instances.append(instance)
        self.LOG.debug("Declared service '{}' from image {}".format(instance.name, instance.image))
        
        if self.puller is not None:
            self.puller.schedule(instance)
        
        return instance
    
    def make_name(self, base: str):
        
        taken = set(self.names)
        name, suffix = base, 1
        
        while name in taken:
            suffix += 1
            name = '{}-{}'.format(base, suffix)
        
        return name
    
    @property
    def names(self):
        
        return [i.name for i in self.instances]
    
    def get(self, name: str) -> ServiceInstance:
        
        for instance in self.instances:
            if instance.name == name:
                return instance
        
        raise ResolutionError(
            "No service named '{}' was declared. Options are: {}".format(name, self.names)
        )
    
    def close(self):
        
        self.declared = True
        return self


def load_declarations(path: str, manifest: Manifest) -> Manifest:
    
    path = os.path.abspath(path)
    
    if not os.path.isfile(path):
        raise ConfigurationError("Declaration file not found: {}".format(path))
    
    namespace = runpy.run_path(path)
    declare = namespace.get(DeclarationConst.ENTRYPOINT)
    
    if not callable(declare):
        raise ConfigurationError(
            "Declaration file {} must define a function '{}(manifest)'".format(path, DeclarationConst.ENTRYPOINT)
        )
    
    manifest.LOG.debug("Loading declarations from {}".format(path))
    declare(manifest)
    return manifest.close()
