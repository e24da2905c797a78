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

"""Module for persisting the settings of services between runs

Records are kept as JSON files, one per service instance:
<directory>/<project>/<store>/<instance>.json
"""

import hashlib
import json
import os
import pathlib

from tender.bay.compass import StoreCompass
from tender.common.annotations import Configured
from tender.common.conf import StoreConf
from tender.common.constants import Encoding, StoreConst
from tender.common.errors import ProjectNotConfigured, StoreNotConfigured
from tender.common.logging import Logged
from tender.common.parser import assert_str_dict, volume_safe


class Warehouse(Configured, Logged):
    
    conf = StoreConf
    
    def __init__(self, directory: str = None, log=None):
        
        Logged.__init__(self, log=log)
        self.directory = directory or StoreCompass().directory
    
    @staticmethod
    def resolve_project(project: str = None):
        
        if not project:
            raise ProjectNotConfigured(
                "No project was declared. Call manifest.project('<name>') in your declaration file"
            )
        
        return project
    
    @classmethod
    def resolve(cls, project: str = None, store: str = None):
        
        project = cls.resolve_project(project)
        
        if not store:
            raise StoreNotConfigured(
                "No store was chosen for project '{}'. Use --store or declare a default store".format(project)
            )
        
        return project, store
    
    @staticmethod
    def make_prefix(project: str, store: str, instance_name: str):
        
        """Readable names may collide once joined (e.g.: shop + dev-eu and shop-dev + eu), the digest may not"""
        
        key = json.dumps([project, store, instance_name]).encode(Encoding.UTF_8)
        digest = hashlib.sha1(key).hexdigest()[:StoreConst.DIGEST_LEN]
        return volume_safe(StoreConst.PREFIX, project, store, instance_name, digest)
    
    def project_path(self, project: str):
        
        return os.path.join(self.directory, project)
    
    def store_path(self, project: str, store: str):
        
        return os.path.join(self.project_path(project), store)
    
    def record_path(self, project: str, store: str, instance_name: str):
        
        return os.path.join(
            self.store_path(project, store),
            '{}.{}'.format(instance_name, StoreConst.RECORD_EXT)
        )
    
    def save(self, project: str, store: str, instance_name: str, record: dict):
        
        path = self.record_path(project, store, instance_name)
        pathlib.Path(os.path.dirname(path)).mkdir(parents=True, exist_ok=True)
        tmp_path = path + '.tmp'
        
        with open(tmp_path, 'w', encoding=Encoding.UTF_8) as f:
            json.dump(assert_str_dict(record), f, indent=2)
        
        os.replace(tmp_path, path)
        self.LOG.debug("Saved settings of service '{}' to {}".format(instance_name, path))
        return path
    
    def load(self, project: str, store: str, instance_name: str):
        
        path = self.record_path(project, store, instance_name)
        
        if not os.path.isfile(path):
            return None
        
        with open(path, 'r', encoding=Encoding.UTF_8) as f:
            return json.load(f)
    
    async def delete(self, project: str, store: str, instance, captain):
        
        record = self.load(project, store, instance.name)
        
        if record is None:
            return False
        
        instance.spec.store_prefix = self.make_prefix(project, store, instance.name)
        instance.spec.load(record)
        await instance.spec.cleanup(captain)
        os.remove(self.record_path(project, store, instance.name))
        self.LOG.info("Removed settings of service '{}' from store '{}'".format(instance.name, store))
        
        store_path = self.store_path(project, store)
        
        if os.path.isdir(store_path) and len(os.listdir(store_path)) == 0:
            os.rmdir(store_path)
        
        return True
    
    def list_stores(self, project: str):
        
        path = self.project_path(project)
        
        if not os.path.isdir(path):
            return []
        
        return sorted([
            name for name in os.listdir(path)
            if os.path.isdir(os.path.join(path, name))
        ])
