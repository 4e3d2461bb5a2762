"""Turn one form unit of the easy-apply modal into a typed Field.

The markup never states a field's kind. The only reliable signal is which
controls the unit contains, so classification is a fixed chain of shape
checks, most specific first, and the first one that recognises the unit wins:

  1. single-line text / number input  -> TEXT or NUMERIC
  2. radio inputs in a fieldset       -> RADIO
  3. <select>                         -> SELECT
  4. checkbox inputs                  -> CHECKBOX

Anything else is UNCLASSIFIABLE and the caller skips it.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Sequence

from applybot.apply import selectors as sel
from applybot.apply.driver import Driver, Locator
from applybot.apply.fields import UNCLASSIFIABLE, Classification, Field, FieldKind, Option

log = logging.getLogger(__name__)

# None: shape not recognised, try the next check.
# UNCLASSIFIABLE: shape recognised but unusable (e.g. no label), stop here.
TryClassify = Callable[[Driver, Locator], Awaitable["Classification | None"]]


async def _text_of(driver: Driver, scope: Locator, selector: str) -> str | None:
    el = await driver.find_one(scope, selector)
    if el is None:
        return None
    return (await driver.read_text(el)).strip()


async def _is_required(driver: Driver, locator: Locator) -> bool:
    return await driver.read_attribute(locator, "required") is not None


async def try_text(driver: Driver, unit: Locator) -> Classification | None:
    control = await driver.find_one(unit, sel.TEXT_INPUT)
    if control is None:
        return None
    label = await _text_of(driver, unit, sel.TEXT_LABEL)
    if label is None:
        return UNCLASSIFIABLE
    control_id = await driver.read_attribute(control, "id") or ""
    kind = FieldKind.NUMERIC if sel.NUMERIC_ID_MARKER in control_id else FieldKind.TEXT
    return Field(
        label=label,
        kind=kind,
        locator=control,
        required=await _is_required(driver, control),
    )


async def try_radio(driver: Driver, unit: Locator) -> Classification | None:
    controls = await driver.find_all(unit, sel.RADIO_INPUT)
    if not controls:
        return None
    label = await _text_of(driver, unit, sel.RADIO_LEGEND)
    if label is None:
        return UNCLASSIFIABLE
    options = []
    for control in controls:
        options.append(
            Option(
                label=await driver.read_attribute(control, "value") or "",
                locator=control,
                required=await _is_required(driver, control),
            )
        )
    return Field(
        label=label,
        kind=FieldKind.RADIO,
        locator=await driver.find_one(unit, "fieldset"),
        required=any(o.required for o in options),
        options=tuple(options),
    )


async def try_select(driver: Driver, unit: Locator) -> Classification | None:
    control = await driver.find_one(unit, sel.SELECT_INPUT)
    if control is None:
        return None
    label = await _text_of(driver, unit, sel.SELECT_LABEL)
    if label is None:
        return UNCLASSIFIABLE
    options = tuple([
        Option(label=await driver.read_text(el), locator=el)
        for el in await driver.find_all(control, sel.SELECT_OPTION)
    ])
    return Field(
        label=label,
        kind=FieldKind.SELECT,
        locator=control,
        required=await _is_required(driver, control),
        options=options,
    )


async def try_checkbox(driver: Driver, unit: Locator) -> Classification | None:
    controls = await driver.find_all(unit, sel.CHECKBOX_INPUT)
    if not controls:
        return None
    label = await _text_of(driver, unit, sel.CHECKBOX_LEGEND)
    if label is None:
        return UNCLASSIFIABLE
    # keyed by the data attribute: checkbox ids change between renders
    options = tuple([
        Option(label=await driver.read_attribute(c, sel.CHECKBOX_OPTION_ATTR) or "", locator=c)
        for c in controls
    ])
    title = await driver.find_one(unit, sel.CHECKBOX_REQUIRED_TITLE)
    classes = (await driver.read_attribute(title, "class") or "") if title is not None else ""
    return Field(
        label=label,
        kind=FieldKind.CHECKBOX,
        locator=await driver.find_one(unit, "fieldset"),
        required=sel.CHECKBOX_REQUIRED_CLASS in classes.split(),
        options=options,
    )


CLASSIFIERS: tuple[TryClassify, ...] = (try_text, try_radio, try_select, try_checkbox)


async def classify(
    driver: Driver,
    unit: Locator,
    classifiers: Sequence[TryClassify] = CLASSIFIERS,
) -> Classification:
    """Classify a form unit; returns UNCLASSIFIABLE when no shape check applies."""
    for try_classify in classifiers:
        result = await try_classify(driver, unit)
        if result is UNCLASSIFIABLE:
            log.debug("Form unit matched %s but has no label, skipping", try_classify.__name__)
            return result
        if result is not None:
            log.debug("Classified %s field: %r", result.kind.value, result.label)
            return result
    log.debug("Form unit not classifiable, skipping")
    return UNCLASSIFIABLE


async def extract_fields(driver: Driver, scope: Locator | None = None) -> list[Field]:
    """Classify every form unit on the current step, dropping unclassifiable ones."""
    fields = []
    for unit in await driver.find_all(scope, sel.FORM_UNIT):
        result = await classify(driver, unit)
        if result is not UNCLASSIFIABLE:
            fields.append(result)
    return fields
