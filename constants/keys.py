class StateKeys:
    """Keys for data stored in ``st.session_state``."""

    ONBOARDING = "onboarding.snapshot"
    FINALIZATION = "onboarding.finalization"
    SUBMISSIONS = "onboarding.submissions"
    TCU_ACCEPTED = "onboarding.tcu_accepted"
    CURRENT_STEP = "onboarding.current_step"


class QueryKeys:
    """Keys used in ``st.query_params`` for route synchronisation."""

    ROUTE = "route"
