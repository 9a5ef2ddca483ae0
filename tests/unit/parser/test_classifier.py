"""Tests for role family and grade classification."""

import random

import pytest

from hh_tracker.tracker.models import GradeTag, RoleTag


class TestRoleFamily:
    """Test role family rules one by one."""

    @pytest.mark.parametrize(
        "title,expected",
        [
            ("Продакт-менеджер", RoleTag.PRODUCT),
            ("Senior Product Manager", RoleTag.PRODUCT),
            ("Менеджер по продукту", RoleTag.PRODUCT),
            ("Product Marketing Manager", RoleTag.PRODUCT_MARKETING),
            ("Маркетолог продукта", RoleTag.PRODUCT_MARKETING),
            ("Бизнес-аналитик", RoleTag.ANALYST),
            ("Data Analyst", RoleTag.ANALYST),
            ("Руководитель проектов", RoleTag.PROJECT),
            ("IT Project Manager", RoleTag.PROJECT),
            ("Проджект-менеджер", RoleTag.PROJECT),
            ("Интернет-маркетолог", RoleTag.MARKETING),
            ("Marketing Lead", RoleTag.MARKETING),
            ("Python-разработчик", RoleTag.OTHER),
        ],
    )
    def test_default_rules(self, title, expected):
        """Each title maps to the first matching rule's tag."""
        from hh_tracker.parser.classifier import role_family

        assert role_family(title) == expected

    def test_analyst_wins_over_product(self):
        """Rule order decides compound titles."""
        from hh_tracker.parser.classifier import role_family

        assert role_family("Продуктовый аналитик") == RoleTag.ANALYST

    def test_custom_rule_table(self):
        """Callers can pass their own precedence."""
        from hh_tracker.parser.classifier import ROLE_RULES, role_family

        product_first = tuple(
            rule for rule in ROLE_RULES if rule.tag == RoleTag.PRODUCT
        ) + tuple(rule for rule in ROLE_RULES if rule.tag != RoleTag.PRODUCT)

        assert role_family("Продуктовый аналитик", product_first) == RoleTag.PRODUCT

    def test_case_insensitive(self):
        """Titles are case-folded before matching."""
        from hh_tracker.parser.classifier import role_family

        assert role_family("PRODUCT OWNER") == RoleTag.PRODUCT


class TestGrade:
    """Test grade rules one by one."""

    @pytest.mark.parametrize(
        "title,expected",
        [
            ("Junior Product Manager", GradeTag.JUNIOR),
            ("Младший аналитик", GradeTag.JUNIOR),
            ("Стажёр-аналитик", GradeTag.JUNIOR),
            ("Product Intern", GradeTag.JUNIOR),
            ("Team Lead", GradeTag.LEAD),
            ("Тимлид аналитиков", GradeTag.LEAD),
            ("Head of Product", GradeTag.LEAD),
            ("Руководитель проектов", GradeTag.LEAD),
            ("Senior Product Manager", GradeTag.SENIOR),
            ("Старший менеджер проектов", GradeTag.SENIOR),
            ("Продакт-менеджер", GradeTag.MIDDLE),
        ],
    )
    def test_default_rules(self, title, expected):
        """Each title maps to the first matching grade."""
        from hh_tracker.parser.classifier import grade

        assert grade(title) == expected

    def test_junior_wins_over_lead(self):
        """Junior markers are checked before lead markers."""
        from hh_tracker.parser.classifier import grade

        assert grade("Junior Team Lead") == GradeTag.JUNIOR

    def test_lead_wins_over_senior(self):
        """Lead markers are checked before senior markers."""
        from hh_tracker.parser.classifier import grade

        assert grade("Senior Team Lead") == GradeTag.LEAD


class TestTotality:
    """Classifiers always return a tag."""

    def test_empty_string(self):
        """Empty titles get the defaults."""
        from hh_tracker.parser.classifier import grade, role_family

        assert role_family("") == RoleTag.OTHER
        assert grade("") == GradeTag.MIDDLE

    def test_random_unicode(self):
        """Arbitrary Unicode never raises."""
        from hh_tracker.parser.classifier import grade, role_family

        rng = random.Random(1234)
        ranges = [(0x20, 0x7E), (0x400, 0x4FF), (0x1F300, 0x1F5FF)]
        for _ in range(200):
            title = "".join(
                chr(rng.randint(*rng.choice(ranges)))
                for _ in range(rng.randint(0, 40))
            )
            assert role_family(title) in RoleTag
            assert grade(title) in GradeTag
