from fakes import init_mint_ix, make_tx
from token_classifier import is_token_creation


def test_none_and_missing_logs_are_not_creations():
    tx = make_tx()
    del tx["meta"]["logMessages"]

    assert is_token_creation(None) is False
    assert is_token_creation(tx) is False
    assert is_token_creation({"transaction": {}}) is False


def test_log_phrases_match_case_insensitively():
    upper = make_tx(logs=["Program log: INSTRUCTION: InitializeMint"])
    lower = make_tx(logs=["program log: instruction: initializemint"])

    assert is_token_creation(upper) is True
    assert is_token_creation(lower) is True


def test_other_creation_phrases():
    assert is_token_creation(make_tx(logs=["Program log: Create"])) is True
    assert is_token_creation(make_tx(logs=["Token mint initialized for xyz"])) is True


def test_initialize_mint_instruction_without_matching_logs():
    tx = make_tx(logs=[], instructions=[init_mint_ix()])

    assert is_token_creation(tx) is True


def test_unrelated_transaction():
    tx = make_tx(
        logs=["Program log: Instruction: Transfer", "Program TokenkegQ success"],
        instructions=[{"parsed": {"type": "transfer", "info": {}}}],
    )

    assert is_token_creation(tx) is False


def test_malformed_data_does_not_raise():
    assert is_token_creation({"meta": "oops"}) is False
    assert is_token_creation({"meta": {"logMessages": [None, 3]}, "transaction": "x"}) is False
    assert is_token_creation({"meta": {"logMessages": []}, "transaction": {"message": {"instructions": [1, "a", {"parsed": "x"}]}}}) is False


def test_same_answer_on_repeated_calls():
    tx = make_tx(logs=["Program log: Instruction: InitializeMint"])

    assert {is_token_creation(tx) for _ in range(5)} == {True}
