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

import subprocess
from collections import OrderedDict
from typing import List

from tender.api.main import TenderAPI
from tender.bay.captain import Captain
from tender.bay.compass import DeclarationCompass
from tender.bay.convoy import Convoy
from tender.bay.manifest import Manifest, load_declarations
from tender.bay.shipyard import ImagePuller
from tender.bay.warehouse import Warehouse
from tender.common.annotations import validate
from tender.common.errors import MisusageError, ServiceNotYetRun
from tender.common.utils import exit_code


class StackAPI(TenderAPI):
    
    """Entry points for running a command among its declared services and for inspecting their stores"""
    
    valid = TenderAPI.valid
    
    def __init__(self, file: str = None, warehouse: Warehouse = None, **kwargs):
        
        super().__init__(**kwargs)
        self.file = file or DeclarationCompass().file
        self.warehouse = warehouse or Warehouse(log=self.LOG)
    
    def declare(self, puller: ImagePuller = None) -> Manifest:
        
        return load_declarations(self.file, Manifest(puller=puller, log=self.LOG))
    
    def resolve_store(self, manifest: Manifest, store: str = None):
        
        return Warehouse.resolve(manifest.project_name, store or manifest.default_store)
    
    def restore(self, instance, project: str, store: str):
        
        record = self.warehouse.load(project, store, instance.name)
        
        if record is None:
            return None
        
        instance.spec.store_prefix = self.warehouse.make_prefix(project, store, instance.name)
        return instance.spec.load(record)
    
    @validate(cmd=valid.list_of_str, store=valid.dns_safe_or_none)
    async def run(self, cmd: List[str], store: str = None, captain: Captain = None):
        
        captain = captain or Captain(log=self.LOG)
        puller = ImagePuller(captain, log=self.LOG)
        
        try:
            manifest = self.declare(puller)
            
            if store or manifest.default_store:
                project, store = self.resolve_store(manifest, store)
                warehouse = self.warehouse
            else:
                project, warehouse = manifest.project_name, None
        except Exception:
            await puller.drain()
            raise
        
        convoy = Convoy(manifest, captain, warehouse=warehouse, project=project, store=store, log=self.LOG)
        return await convoy.voyage(list(cmd))
    
    def stores(self):
        
        project = Warehouse.resolve_project(self.declare().project_name)
        return self.warehouse.list_stores(project)
    
    @validate(store=valid.dns_safe_or_none)
    def show(self, store: str = None):
        
        manifest = self.declare()
        project, store = self.resolve_store(manifest, store)
        report = OrderedDict()
        
        for instance in manifest.instances:
            if self.restore(instance, project, store) is None:
                report[instance.name] = 'Not yet run'
            else:
                report[instance.name] = instance.data
        
        return {"Store '{}' of project '{}'".format(store, project): report}
    
    @validate(instance=valid.non_empty_str, tool=valid.non_empty_str, store=valid.dns_safe_or_none)
    def tool(self, instance: str, tool: str, args: List[str] = (), store: str = None):
        
        manifest = self.declare()
        project, store = self.resolve_store(manifest, store)
        target = manifest.get(instance)
        
        if self.restore(target, project, store) is None:
            raise ServiceNotYetRun(
                "Service '{}' has no settings in store '{}'. Run a command with '--store {}' first"
                .format(target.name, store, store)
            )
        
        argv = target.spec.tool_cmd(tool, list(args))
        self.LOG.debug("Calling: {}".format(' '.join(argv)))
        
        try:
            return exit_code(subprocess.call(argv, env=target.spec.tool_env()))
        except OSError as e:
            raise MisusageError(
                "Could not launch tool '{}'. Assert that it's installed on this machine".format(argv[0])
            ) from e
    
    @validate(store=valid.dns_safe_or_none)
    async def delete(self, store: str = None, captain: Captain = None):
        
        manifest = self.declare()
        project, store = self.resolve_store(manifest, store)
        
        if not self._decide(
                "Would you like to remove the settings and data of store '{}' of project '{}'?".format(store, project),
                default=True):
            self.LOG.info("Aborted")
            return None
        
        captain = captain or Captain(log=self.LOG)
        removed = []
        
        for instance in manifest.instances:
            if await self.warehouse.delete(project, store, instance, captain):
                removed.append(instance.name)
        
        if len(removed) == 0:
            self.LOG.warn("Store '{}' of project '{}' had no settings".format(store, project))
        
        return {'Removed from store {}'.format(store): removed}
