import functools
import inspect
import urllib.parse


class SignalDescriptor:
    """Return `$Model.field` on the class, real value on an instance."""

    def __init__(self, field_name: str) -> None:
        self.field_name = field_name

    def __get__(self, instance, owner):
        #  class access  →  owner is the model class, instance is None
        if instance is None:
            if getattr(owner, "_use_namespace", False):
                return f"${owner.get_namespace()}.{self.field_name}"
            return f"${self.field_name}"

        #  instance access  →  behave like a normal attribute
        return instance.__dict__[self.field_name]


# Parameters FastHTML injects on its own; they never appear in action URLs
SPECIAL_PARAMS = {'session', 'auth', 'request', 'req', 'htmx', 'scope', 'app', 'datastar'}
SPECIAL_ANNOTATIONS = ('Request', 'HtmxHeaders', 'Starlette', 'DatastarPayload')


class EventMethodDescriptor:
    """Generate Datastar action strings for @event methods, but allow direct execution."""

    def __init__(self, method_name: str, entity_class, original_method):
        self.method_name = method_name
        self.entity_class = entity_class
        self.original_method = original_method
        self._event_info = getattr(original_method, '_event_info', None)

    def __get__(self, instance, owner):
        if instance is None:
            # Accessed on class - return self for URL generation
            return self
        return functools.partial(self.original_method, instance)

    @property
    def path(self) -> str:
        if self._event_info and self._event_info.path:
            return self._event_info.path
        return f"/{self.entity_class.get_namespace().lower()}/{self.method_name}"

    def url_params(self) -> list:
        """Names of the parameters that travel in the query string."""
        if not (self._event_info and self._event_info.signature):
            return []
        names = []
        for name, param in list(self._event_info.signature.parameters.items())[1:]:  # Skip 'self'
            if name.lower() in SPECIAL_PARAMS:
                continue
            anno = param.annotation
            if anno is not inspect.Parameter.empty and getattr(anno, '__name__', None) in SPECIAL_ANNOTATIONS:
                continue
            names.append(name)
        return names

    def __call__(self, *args, **kwargs):
        """Execute the method when given an entity, otherwise build the Datastar action."""
        if args and isinstance(args[0], self.entity_class):
            return self.original_method(*args, **kwargs)

        http_method = self._event_info.method.lower() if self._event_info else "get"
        params = dict(zip(self.url_params(), args))
        params.update({k: v for k, v in kwargs.items() if v is not None})

        if params:
            query_string = urllib.parse.urlencode(params, doseq=True)
            return f"@{http_method}('{self.path}?{query_string}')"
        return f"@{http_method}('{self.path}')"

    def __repr__(self) -> str:
        return f"<event {self.entity_class.__name__}.{self.method_name}>"
