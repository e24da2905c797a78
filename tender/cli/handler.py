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

import asyncio
import inspect
import sys

from tender.api.main import TenderAPI
from tender.common.annotations import Interactive
from tender.common.errors import PrettyError
from tender.common.logging import LOG
from tender.common.parser import StructCleaner


class CommandHandler(Interactive):
    
    interactive_mode: bool = False
    declaration_file: str = None
    struct_cleaner = StructCleaner(nones=[None])
    
    @classmethod
    def run(cls, _api_cls, _method, _exit_with_response: bool = False, _response_callback=None, **method_kwargs):
        
        """Calls an API method and exits the process
        
        When _exit_with_response is set, the method's response is the exit code
        (e.g.: the exit code of the command launched among the services).
        """
        
        code, error = 0, None
        
        try:
            api = cls.init_api(_api_cls)
            method = getattr(api, _method)
            response = method(**cls.struct_cleaner(method_kwargs))
            
            if inspect.iscoroutine(response):
                response = asyncio.run(response)
            
            if _exit_with_response:
                code = response
            else:
                cls.show_response(response, _response_callback)
        except KeyboardInterrupt:
            code = 130
            LOG.warn("Interrupted")
        except Exception as e:
            error = e
            code = 1
            cls.show_exception(e)
        finally:
            if LOG.debug_mode and error is not None:
                raise error
            else:
                sys.exit(code)
    
    @classmethod
    def init_api(cls, api_cls):
        
        assert issubclass(api_cls, TenderAPI)
        return api_cls(
            file=cls.declaration_file,
            interactive=cls.interactive_mode
        )
    
    @classmethod
    def show_response(cls, response, callback=None):
        
        if callable(callback):
            response = callback(response)
        
        if response is not None:
            LOG.echo(response)
    
    @classmethod
    def show_exception(cls, exception):
        
        if isinstance(exception, PrettyError):
            exc = exception.pretty()
        else:
            exc = PrettyError.parse_exc(exception)
        
        LOG.error(exc)


CMD = CommandHandler()
