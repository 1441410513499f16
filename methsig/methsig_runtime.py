"""
The declaration layer: `func` and `method` decorators that compile a
signature once, when the routine is defined, and run its binding plan
as a prelude on every call.

    @func("$greeting, $place = 'world'")
    def hello(greeting, place):
        return f"{greeting}, {place}!"

    class Counter:
        @method("$step = 1")
        def bump(self, step):
            ...

The body receives every bound name as a keyword argument.
"""

import functools
import inspect
import sys
from typing import Callable, Optional

from methsig.methsig_compiler import CompileOptions, compile_signature
from methsig.methsig_config import Config
from methsig.methsig_datatypes import BindingPlan
from methsig.methsig_errors import ANON, SignatureError


def _routine_name(fn: Callable) -> str:
    name = getattr(fn, "__qualname__", None) or getattr(fn, "__name__", None)
    if not name or name.endswith("<lambda>"):
        return ANON
    return name


class Declarator:
    """Compiles signatures for one declaring keyword.

    A method declarator implies an invocant: `invocant` if given,
    otherwise the configured default (`$self`). A signature may name its
    own invocant with a leading `$name:` clause.
    """

    def __init__(self, name: str, *, method: bool = False, invocant: Optional[str] = None, config: Optional[Config] = None):
        self.name = name
        self.method = method
        self.invocant = invocant
        self._config = config

    def __repr__(self) -> str:
        return f"<Declarator {self.name}>"

    def __call__(self, signature: str = "") -> Callable[[Callable], Callable]:
        frame = sys._getframe(1)
        # Closure variables of the defining scope, for default expressions
        env_locals = {} if frame.f_locals is frame.f_globals else dict(frame.f_locals)
        del frame

        def decorate(fn: Callable) -> Callable:
            return self.install(fn, signature, env_locals)
        return decorate

    @property
    def config(self) -> Config:
        # Read from the environment once, on first use
        if self._config is None:
            self._config = Config.from_env()
        return self._config

    def options_for(self, fn: Callable, env_locals=None) -> CompileOptions:
        config = self.config
        invocant = None
        if self.method:
            invocant = self.invocant or config.invocant
            if not invocant.startswith("$"):
                invocant = "$" + invocant
        return CompileOptions(
            invocant=invocant,
            allow_alias=config.allow_alias,
            name=_routine_name(fn),
            env_globals=getattr(fn, "__globals__", {}),
            env_locals=env_locals or {},
            debug=config.debug,
        )

    def install(self, fn: Callable, signature: str, env_locals=None) -> Callable:
        """Compiles `signature` and wraps `fn` with the resulting prelude."""
        plan = compile_signature(signature, self.options_for(fn, env_locals))
        pass_raw = self._check_body(fn, plan)

        if inspect.iscoroutinefunction(fn):
            @functools.wraps(fn)
            async def async_wrapper(*args, **kwargs):
                return await fn(**prelude(plan, args, kwargs, pass_raw))
            return async_wrapper

        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            return fn(**prelude(plan, args, kwargs, pass_raw))
        return wrapper

    def _check_body(self, fn: Callable, plan: BindingPlan) -> bool:
        """Returns whether the body wants the raw argument tuple as `_`."""
        try:
            params = inspect.signature(fn).parameters
        except (TypeError, ValueError):
            return False
        takes_kwargs = any(p.kind is inspect.Parameter.VAR_KEYWORD for p in params.values())
        if not takes_kwargs:
            missing = [t for t in plan.targets if t not in params]
            if missing:
                raise SignatureError(f"{_routine_name(fn)}() does not accept parameter(s) {', '.join(missing)}")
        return plan.takes_raw_args and "_" in params


def prelude(plan: BindingPlan, args: tuple, kwargs: dict, pass_raw: bool = False) -> dict:
    bound = plan.bind(args, kwargs)
    if pass_raw:
        bound["_"] = args[1:] if plan.has_invocant else args
    return bound


func = Declarator("func")
method = Declarator("method", method=True)
