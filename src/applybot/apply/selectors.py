"""Document selectors and vocabulary for the LinkedIn jobs UI.

These are a brittle external contract: LinkedIn changes its markup without
notice, so every selector the engine depends on lives here and nowhere else.
"""

# ---------------------------------------------------------------------------
# URLs
# ---------------------------------------------------------------------------

BASE_URL = "https://www.linkedin.com"
LOGIN_URL = f"{BASE_URL}/login"
FEED_URL = f"{BASE_URL}/feed"
JOB_SEARCH_URL = f"{BASE_URL}/jobs/search"
JOB_VIEW_URL = f"{BASE_URL}/jobs/view/"

RESULTS_PER_PAGE = 25

# ---------------------------------------------------------------------------
# Search results
# ---------------------------------------------------------------------------

NO_RESULTS_BANNER = "div > .jobs-search-no-results-banner__image"
RESULT_CARD = ".scaffold-layout__list div ul .scaffold-layout__list-item"
CARD_TITLE = ".job-card-list__title--link span strong"
CARD_COMPANY = ".artdeco-entity-lockup__subtitle span"
CARD_LINK = ".job-card-list__title--link"
CARD_STATE = ".job-card-list__footer-wrapper li"
CARD_DISMISS = ".job-card-container__action"
JOB_DESCRIPTION = "#job-details p"

# ---------------------------------------------------------------------------
# Easy-apply modal
# ---------------------------------------------------------------------------

EASY_APPLY_BUTTON = ".scaffold-layout__inner .jobs-apply-button"
FORM_UNIT = ".jobs-easy-apply-modal__content form .fb-dash-form-element"
RESUME_UPLOAD_INPUT = ".js-jobs-document-upload__container input"

NEXT_BUTTON = '.jobs-easy-apply-modal__content footer button[aria-label="Continue to next step"]'
REVIEW_BUTTON = '.jobs-easy-apply-modal__content footer button[aria-label="Review your application"]'
SUBMIT_BUTTON = '.jobs-easy-apply-modal__content footer button[aria-label="Submit application"]'
ERROR_FEEDBACK = ".artdeco-inline-feedback--error"
FOLLOW_COMPANY_LABEL = 'label[for="follow-company-checkbox"]'
TYPEAHEAD_SUGGESTIONS = ".basic-typeahead__triggered-content"

# ---------------------------------------------------------------------------
# Form unit contents, checked in this order by the classifier
# ---------------------------------------------------------------------------

TEXT_INPUT = 'input[type="text"], input[type="number"]'
TEXT_LABEL = "label"
NUMERIC_ID_MARKER = "-numeric"

RADIO_INPUT = 'fieldset div input[type="radio"]'
RADIO_LEGEND = "legend span span"

SELECT_INPUT = "select"
SELECT_OPTION = "option"
SELECT_LABEL = "label span"

CHECKBOX_INPUT = 'input[type="checkbox"]'
CHECKBOX_OPTION_ATTR = "data-test-text-selectable-option__input"
CHECKBOX_LEGEND = "fieldset legend span"
CHECKBOX_REQUIRED_TITLE = "fieldset legend div"
CHECKBOX_REQUIRED_CLASS = "fb-dash-form-element__label-title--is-required"
