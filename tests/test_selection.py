import unittest

from market_core.accessor import effective_metrics
from market_core.model import Dataset
from market_core.selection import (
    WHOLE_CITY,
    DatasetLoaded,
    SelectCity,
    SelectCountry,
    SelectPeriod,
    SelectSubmarket,
    Selection,
    describe_selection,
    event_from_dict,
    initial_selection,
    reconcile,
    reduce_selection,
    selection_options,
)

from sample_data import sample_raw

CASCADE_RAW = {
    "countries": {
        "A": {
            "cities": {
                "A1": {
                    "periods": {
                        "P1": {"market": {"vacancy": 1}, "subMarkets": {"S1": {"vacancy": 2}, "S2": {"vacancy": 3}}},
                    }
                }
            }
        },
        "B": {"cities": {"B1": {"periods": {"P2": {"market": {"vacancy": 4}}}}}},
    }
}


class TestInitialSelection(unittest.TestCase):
    def test_empty_until_loaded(self):
        self.assertEqual(initial_selection(None), Selection())
        self.assertEqual(initial_selection(Dataset.from_raw({})), Selection("", "", "", ""))

    def test_first_keys_and_first_chronological_period(self):
        dataset = Dataset.from_raw(sample_raw())
        self.assertEqual(initial_selection(dataset), Selection("Czech Republic", "Prague", "Q4 2022", WHOLE_CITY))

    def test_dataset_loaded_event_from_empty_state(self):
        dataset = Dataset.from_raw(CASCADE_RAW)
        self.assertEqual(reduce_selection(dataset, Selection(), DatasetLoaded()), Selection("A", "A1", "P1", "S1"))


class TestReducer(unittest.TestCase):
    def setUp(self):
        self.dataset = Dataset.from_raw(CASCADE_RAW)
        self.start = Selection("A", "A1", "P1", "S1")

    def test_country_change_cascades_to_whole_city(self):
        nxt = reduce_selection(self.dataset, self.start, SelectCountry("B"))
        self.assertEqual(nxt, Selection("B", "B1", "P2", WHOLE_CITY))

    def test_submarket_change_does_not_cascade(self):
        nxt = reduce_selection(self.dataset, self.start, SelectSubmarket("S2"))
        self.assertEqual(nxt, Selection("A", "A1", "P1", "S2"))

    def test_whole_city_is_always_valid(self):
        nxt = reduce_selection(self.dataset, self.start, SelectSubmarket(WHOLE_CITY))
        self.assertEqual(nxt.submarket, WHOLE_CITY)

    def test_unknown_submarket_falls_back_to_first(self):
        nxt = reduce_selection(self.dataset, self.start, SelectSubmarket("S9"))
        self.assertEqual(nxt.submarket, "S1")

    def test_unknown_country_falls_back_to_first(self):
        nxt = reduce_selection(self.dataset, self.start, SelectCountry("Z"))
        self.assertEqual(nxt, Selection("A", "A1", "P1", "S1"))

    def test_reducer_does_not_mutate_state(self):
        reduce_selection(self.dataset, self.start, SelectCountry("B"))
        self.assertEqual(self.start, Selection("A", "A1", "P1", "S1"))

    def test_unknown_event_type(self):
        with self.assertRaises(TypeError):
            reduce_selection(self.dataset, self.start, "country")


class TestReducerOnSample(unittest.TestCase):
    def setUp(self):
        self.dataset = Dataset.from_raw(sample_raw())

    def test_city_change_resets_period_and_submarket(self):
        start = Selection("Czech Republic", "Prague", "Q2 2023", "Prague 5")
        nxt = reduce_selection(self.dataset, start, SelectCity("Brno"))
        self.assertEqual(nxt, Selection("Czech Republic", "Brno", "Q1 2023", WHOLE_CITY))

    def test_period_change_keeps_valid_submarket(self):
        start = Selection("Czech Republic", "Prague", "Q2 2023", "Prague 1")
        nxt = reduce_selection(self.dataset, start, SelectPeriod("Q1 2023"))
        self.assertEqual(nxt.submarket, "Prague 1")

    def test_period_change_resets_invalid_submarket(self):
        start = Selection("Czech Republic", "Prague", "Q2 2023", "Prague 5")
        nxt = reduce_selection(self.dataset, start, SelectPeriod("Q1 2023"))
        self.assertEqual(nxt, Selection("Czech Republic", "Prague", "Q1 2023", "Prague 1"))
        nxt = reduce_selection(self.dataset, nxt, SelectPeriod("Q4 2022"))
        self.assertEqual(nxt.submarket, WHOLE_CITY)

    def test_period_change_keeps_whole_city(self):
        start = Selection("Czech Republic", "Prague", "Q1 2023", WHOLE_CITY)
        nxt = reduce_selection(self.dataset, start, SelectPeriod("Q2 2023"))
        self.assertEqual(nxt.submarket, WHOLE_CITY)

    def test_country_without_cities_leaves_downstream_empty(self):
        start = initial_selection(self.dataset)
        nxt = reduce_selection(self.dataset, start, SelectCountry("Slovakia"))
        self.assertEqual(nxt, Selection("Slovakia", "", "", WHOLE_CITY))
        self.assertIsNone(effective_metrics(self.dataset, nxt.country, nxt.city, nxt.period, nxt.submarket))
        self.assertEqual(selection_options(self.dataset, nxt).cities, [])


class TestReconcile(unittest.TestCase):
    def test_stale_keys_after_reload(self):
        old = Selection("Czech Republic", "Prague", "Q2 2023", "Prague 1")
        reloaded = Dataset.from_raw(CASCADE_RAW)
        self.assertEqual(reconcile(reloaded, old), Selection("A", "A1", "P1", "S1"))

    def test_stale_period_only(self):
        dataset = Dataset.from_raw(sample_raw())
        stale = Selection("Czech Republic", "Prague", "Q3 2019", "Prague 1")
        self.assertEqual(reconcile(dataset, stale), Selection("Czech Republic", "Prague", "Q4 2022", WHOLE_CITY))

    def test_valid_state_is_unchanged(self):
        dataset = Dataset.from_raw(sample_raw())
        state = Selection("Czech Republic", "Prague", "Q2 2023", "Prague 5")
        self.assertIs(reconcile(dataset, state), state)


class TestHelpers(unittest.TestCase):
    def test_event_from_dict(self):
        self.assertEqual(event_from_dict({"kind": "city", "value": "Brno"}), SelectCity("Brno"))
        self.assertEqual(event_from_dict({"kind": "Submarket"}), SelectSubmarket(""))
        self.assertEqual(event_from_dict({"kind": "loaded"}), DatasetLoaded())
        with self.assertRaises(ValueError):
            event_from_dict({"kind": "district", "value": "x"})

    def test_describe_selection(self):
        self.assertEqual(describe_selection(Selection("A", "Prague", "Q1 2023", "")), "Prague — Q1 2023 — City total")
        self.assertEqual(describe_selection(Selection("A", "Prague", "Q1 2023", "Prague 1")), "Prague — Q1 2023 — Prague 1")


if __name__ == "__main__":
    unittest.main()
