"""Form handle resolution.

Looks up capabilities on opaque form handles, extracts their payload
through ranked strategies, and adapts form libraries to the uniform
API the dialog registry expects.
"""

from grid_dialogs.forms.adapters import (
    FormAdapter,
    FormikAdapter,
    GenericFormAdapter,
    ReactHookFormAdapter,
    create_form_adapter,
    is_formik,
    is_react_hook_form,
)
from grid_dialogs.forms.capabilities import has_capability, lookup, maybe_await
from grid_dialogs.forms.handles import DictFormHandle, ModelFormHandle, SchemaFormHandle
from grid_dialogs.forms.refs import FormRef
from grid_dialogs.forms.resolver import FormHandleResolver
from grid_dialogs.forms.strategies import (
    ElementsStrategy,
    FormStrategy,
    HandleSubmitStrategy,
    PropsValuesStrategy,
    StateStrategy,
    ValidatedValuesStrategy,
    ValidateThenValuesStrategy,
    ValuesStrategy,
    default_strategies,
)

__all__ = [
    # Resolver
    "FormHandleResolver",
    "FormRef",
    # Strategies
    "ElementsStrategy",
    "FormStrategy",
    "HandleSubmitStrategy",
    "PropsValuesStrategy",
    "StateStrategy",
    "ValidatedValuesStrategy",
    "ValidateThenValuesStrategy",
    "ValuesStrategy",
    "default_strategies",
    # Capabilities
    "has_capability",
    "lookup",
    "maybe_await",
    # Adapters
    "FormAdapter",
    "FormikAdapter",
    "GenericFormAdapter",
    "ReactHookFormAdapter",
    "create_form_adapter",
    "is_formik",
    "is_react_hook_form",
    # Handles
    "DictFormHandle",
    "ModelFormHandle",
    "SchemaFormHandle",
]
