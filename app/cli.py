"""
Interactive Terminal Front End for Expense Tracker

A numbered menu rendered with Rich. Options mirror the web routes one for
one and go through the same flows, so both front ends apply the same rules
to the same files.

The menu never keeps data between actions: each action reloads the files.
Problems are printed and the menu comes back; nothing here is fatal.
"""

from datetime import date
from pathlib import Path
from typing import Callable, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from expense_tracker.audit import configure_logging, get_logger
from expense_tracker.config import get_settings
from expense_tracker.ledger import InvalidCategoryError
from expense_tracker.models.expense import Expense
from expense_tracker.orchestrator import AppComponents, create_app_components
from expense_tracker.queries import expenses_to_csv, expenses_to_json
from expense_tracker.services.storage import (
    DuplicateError,
    InvalidFormatError,
    NotFoundError,
    StorageError,
)
from expense_tracker.validation import ExpenseValidationError


logger = get_logger(__name__)

CONFIRM_ANSWERS = ("o", "oui")
CHART_WIDTH = 40

MAIN_MENU = [
    ("1", "Ajouter une dépense"),
    ("2", "Voir toutes les dépenses"),
    ("3", "Modifier une dépense"),
    ("4", "Supprimer une dépense"),
    ("5", "Voir les rapports"),
    ("6", "Gérer les catégories"),
    ("7", "Exporter les données"),
    ("8", "Quitter"),
]


def _money(amount) -> str:
    return f"{amount:.2f}€"


class ExpenseTrackerCLI:
    """Interactive menu loop."""

    def __init__(
        self,
        app_components: AppComponents,
        console: Optional[Console] = None,
    ):
        self._components = app_components
        self.console = console or Console()

    # -------------------------------------------------------------------------
    # Input helpers
    # -------------------------------------------------------------------------

    def _ask(self, label: str, default: str = "") -> str:
        answer = Prompt.ask(
            escape(label),
            console=self.console,
            default=default,
            show_default=bool(default),
        )
        return (answer or "").strip()

    def _error(self, message: str) -> None:
        self.console.print(f"[red]❌ {escape(message)}[/red]")

    def _success(self, message: str) -> None:
        self.console.print(f"[green]✅ {escape(message)}[/green]")

    def _pick_index(self, label: str, size: int) -> Optional[int]:
        """Ask for a 1-based number and return the 0-based index, or None if invalid."""
        answer = self._ask(label)
        if not answer.isdigit() or not 1 <= int(answer) <= size:
            self._error("Numéro invalide.")
            return None
        return int(answer) - 1

    def _pick_category(self, label: str, allow_empty: bool = False) -> Optional[str]:
        """
        Show the registry and read a category number or a new name.

        Returns "" when ``allow_empty`` and the user typed nothing, None when
        the number was out of range.
        """
        categories = self._components.categories.list_categories()
        self.console.print("\nCatégories disponibles :")
        for index, name in enumerate(categories, start=1):
            self.console.print(f"  {index}. {name}", markup=False)

        answer = self._ask(label)
        if not answer:
            return "" if allow_empty else answer
        if answer.isdigit():
            index = int(answer) - 1
            if 0 <= index < len(categories):
                return categories[index]
            self._error("Numéro de catégorie invalide.")
            return None
        return answer

    def _show_validation(self, error: ExpenseValidationError) -> None:
        validator = self._components.expenses.validator
        self.console.print(validator.get_user_friendly_summary(error.result), markup=False)

    # -------------------------------------------------------------------------
    # Menu loop
    # -------------------------------------------------------------------------

    def show_menu(self) -> None:
        lines = "\n".join(f"{key}. {label}" for key, label in MAIN_MENU)
        self.console.print(Panel(lines, title="💰 EXPENSE TRACKER", box=box.DOUBLE))

    def run(self) -> None:
        actions: dict[str, Callable[[], None]] = {
            "1": self.add_expense,
            "2": self.list_expenses,
            "3": self.edit_expense,
            "4": self.delete_expense,
            "5": self.reports_menu,
            "6": self.categories_menu,
            "7": self.export_menu,
        }

        while True:
            self.show_menu()
            choice = self._ask("Choisissez une option (1-8)")
            if choice == "8":
                self.console.print("👋 Au revoir !")
                break
            action = actions.get(choice)
            if action is None:
                self._error("Option invalide. Veuillez choisir entre 1 et 8.")
                continue
            self.run_action(action)

    def run_action(self, action: Callable[[], None]) -> None:
        """Run one menu action, turning core exceptions into messages."""
        try:
            action()
        except ExpenseValidationError as e:
            self._show_validation(e)
        except InvalidCategoryError as e:
            self._error(str(e))
        except DuplicateError as e:
            self._error(str(e))
        except NotFoundError as e:
            self._error(f"Introuvable : {e}")
        except InvalidFormatError as e:
            self._components.audit_logger.log_storage_format_error(
                path=e.location or "",
                error_message=str(e),
            )
            self._error(f"Fichier de données illisible : {e}")
        except StorageError as e:
            self._components.audit_logger.log_error(
                error_type=type(e).__name__,
                error_message=str(e),
            )
            self._error(f"Erreur de stockage : {e}")

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    def add_expense(self) -> None:
        self.console.rule("📝 AJOUTER UNE DÉPENSE")
        amount = self._ask("Montant (€)")
        category = self._pick_category("Choisissez une catégorie (numéro) ou tapez une nouvelle")
        if category is None:
            return
        description = self._ask("Description")
        expense_date = self._ask("Date (AAAA-MM-JJ)", default=date.today().isoformat())

        expense = self._components.expenses.add_expense({
            "amount": amount,
            "category": category,
            "description": description,
            "date": expense_date,
        })
        self._success("Dépense ajoutée avec succès !")
        self.console.print(
            f"💰 {_money(expense.amount)} - {expense.category} - {expense.description}",
            markup=False,
        )

    def list_expenses(self) -> list[Expense]:
        """Print the ledger, most recent first, and return it in display order."""
        self.console.rule("📊 TOUTES LES DÉPENSES")
        flow = self._components.expenses
        expenses = flow.list_expenses()
        if not expenses:
            self.console.print("📭 Aucune dépense enregistrée.")
            return expenses

        table = Table(box=box.SIMPLE)
        table.add_column("#", justify="right")
        table.add_column("Date")
        table.add_column("Montant", justify="right")
        table.add_column("Catégorie")
        table.add_column("Description")
        for index, expense in enumerate(expenses, start=1):
            table.add_row(
                str(index),
                expense.date.isoformat(),
                _money(expense.amount),
                escape(expense.category),
                escape(expense.description),
            )
        self.console.print(table)
        self.console.print(f"💰 Total : {_money(flow.total(expenses))}")
        return expenses

    def edit_expense(self) -> None:
        self.console.rule("✏️ MODIFIER UNE DÉPENSE")
        expenses = self.list_expenses()
        if not expenses:
            return
        index = self._pick_index("Numéro de la dépense à modifier", len(expenses))
        if index is None:
            return

        expense = expenses[index]
        self.console.print(
            f"Dépense actuelle : {_money(expense.amount)} - {expense.category} - {expense.description}",
            markup=False,
        )
        amount = self._ask(f"Nouveau montant (€) [{expense.amount}]")
        category = self._pick_category(
            f"Nouvelle catégorie [{expense.category}]",
            allow_empty=True,
        )
        if category is None:
            return
        description = self._ask(f"Nouvelle description [{expense.description}]")
        expense_date = self._ask(f"Nouvelle date [{expense.date.isoformat()}]")

        self._components.expenses.edit_expense(expense.id, {
            "amount": amount,
            "category": category,
            "description": description,
            "date": expense_date,
        })
        self._success("Dépense modifiée avec succès !")

    def delete_expense(self) -> None:
        self.console.rule("🗑️ SUPPRIMER UNE DÉPENSE")
        expenses = self.list_expenses()
        if not expenses:
            return
        index = self._pick_index("Numéro de la dépense à supprimer", len(expenses))
        if index is None:
            return

        expense = expenses[index]
        self.console.print(
            f"Dépense à supprimer : {_money(expense.amount)} - {expense.category} - {expense.description}",
            markup=False,
        )
        confirmation = self._ask("Êtes-vous sûr ? (o/N)").lower()
        if confirmation not in CONFIRM_ANSWERS:
            self.console.print("❌ Suppression annulée.")
            return

        self._components.expenses.delete_expense(expense.id)
        self._success("Dépense supprimée avec succès !")

    # -------------------------------------------------------------------------
    # Reports
    # -------------------------------------------------------------------------

    def reports_menu(self) -> None:
        self.console.rule("📈 RAPPORTS")
        self.console.print("1. Rapport mensuel")
        self.console.print("2. Rapport par catégorie")
        self.console.print("3. Graphique des dépenses")
        self.console.print("4. Retour au menu principal")
        choice = self._ask("Choisissez une option")

        if choice == "1":
            self.monthly_report()
        elif choice == "2":
            self.category_report()
        elif choice == "3":
            self.expense_chart()
        elif choice != "4":
            self._error("Option invalide.")

    def monthly_report(self) -> None:
        report = self._components.reports.build()
        table = Table(title="Dépenses par mois", box=box.SIMPLE)
        table.add_column("Mois")
        table.add_column("Total", justify="right")
        table.add_column("Nombre", justify="right")
        for group in report.by_month:
            table.add_row(group.month, _money(group.total), str(group.count))
        self.console.print(table)
        self.console.print(f"💰 Total : {_money(report.stats.total_amount)}")

    def category_report(self) -> None:
        report = self._components.reports.build()
        table = Table(title="Dépenses par catégorie", box=box.SIMPLE)
        table.add_column("Catégorie")
        table.add_column("Total", justify="right")
        table.add_column("Nombre", justify="right")
        for group in report.by_category:
            table.add_row(escape(group.name), _money(group.total), str(group.count))
        self.console.print(table)
        self.console.print(
            f"Moyenne par dépense : {_money(report.stats.average_expense)} "
            f"({report.stats.total_count} dépenses)"
        )

    def expense_chart(self) -> None:
        """Horizontal ASCII bars, one per category with spending."""
        groups = [
            group for group in self._components.reports.by_category() if group.count
        ]
        if not groups:
            self.console.print("📭 Aucune dépense enregistrée.")
            return

        largest = max(group.total for group in groups)
        label_width = max(len(group.name) for group in groups)
        for group in groups:
            length = int(group.total / largest * CHART_WIDTH) if largest > 0 else 0
            bar = "█" * max(length, 1)
            self.console.print(
                f"{group.name.ljust(label_width)} | {bar} {_money(group.total)}",
                markup=False,
            )

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    def categories_menu(self) -> None:
        self.console.rule("🏷️ CATÉGORIES")
        self.console.print("1. Voir les catégories")
        self.console.print("2. Ajouter une catégorie")
        self.console.print("3. Renommer une catégorie")
        self.console.print("4. Supprimer une catégorie")
        self.console.print("5. Retour au menu principal")
        choice = self._ask("Choisissez une option")

        if choice == "1":
            self.list_categories()
        elif choice == "2":
            self.add_category()
        elif choice == "3":
            self.rename_category()
        elif choice == "4":
            self.delete_category()
        elif choice != "5":
            self._error("Option invalide.")

    def list_categories(self) -> list[str]:
        categories = self._components.categories.list_categories()
        usage: dict[str, int] = {}
        for expense in self._components.expenses.all_in_stored_order():
            usage[expense.category] = usage.get(expense.category, 0) + 1
        for index, name in enumerate(categories, start=1):
            self.console.print(f"  {index}. {name} ({usage.get(name, 0)} dépense(s))", markup=False)
        return categories

    def add_category(self) -> None:
        name = self._ask("Nom de la nouvelle catégorie")
        if self._components.categories.add_category(name):
            self._success(f"Catégorie ajoutée : {name}")
        else:
            self.console.print(f"ℹ️ La catégorie '{name}' existe déjà.", markup=False)

    def rename_category(self) -> None:
        categories = self.list_categories()
        index = self._pick_index("Numéro de la catégorie à renommer", len(categories))
        if index is None:
            return
        old = categories[index]
        new = self._ask(f"Nouveau nom pour '{old}'")
        relabeled = self._components.categories.rename_category(old, new)
        self._success(f"Catégorie renommée : {old} → {new} ({relabeled} dépense(s) mises à jour)")

    def delete_category(self) -> None:
        categories = self.list_categories()
        index = self._pick_index("Numéro de la catégorie à supprimer", len(categories))
        if index is None:
            return
        name = categories[index]
        fallback = self._components.categories.fallback_category
        confirmation = self._ask(
            f"Supprimer '{name}' ? Ses dépenses iront dans '{fallback}'. (o/N)"
        ).lower()
        if confirmation not in CONFIRM_ANSWERS:
            self.console.print("❌ Suppression annulée.")
            return
        relabeled = self._components.categories.delete_category(name)
        self._success(f"Catégorie supprimée ({relabeled} dépense(s) déplacée(s) vers '{fallback}')")

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    def export_menu(self) -> None:
        self.console.rule("💾 EXPORT")
        self.console.print("1. Exporter en CSV")
        self.console.print("2. Exporter en JSON")
        self.console.print("3. Retour au menu principal")
        choice = self._ask("Choisissez une option")

        if choice == "1":
            self.export_to_file("csv")
        elif choice == "2":
            self.export_to_file("json")
        elif choice != "3":
            self._error("Option invalide.")

    def export_to_file(self, fmt: str) -> Optional[Path]:
        target = Path(self._ask("Fichier de destination", default=f"expenses_export.{fmt}"))
        expenses = self._components.expenses.all_in_stored_order()
        payload = expenses_to_csv(expenses) if fmt == "csv" else expenses_to_json(expenses)
        try:
            target.write_text(payload, encoding="utf-8")
        except OSError as e:
            self._error(f"Impossible d'écrire {target} : {e}")
            return None
        self._success(f"{len(expenses)} dépense(s) exportée(s) vers {target}")
        return target


def main() -> None:
    """Entry point for ``expense-tracker``."""
    settings = get_settings()
    configure_logging(settings.app.log_level)

    logger.info(
        "cli_starting",
        data_dir=str(settings.storage.data_dir),
        environment=settings.app.app_environment,
    )
    cli = ExpenseTrackerCLI(create_app_components(source="cli"))
    try:
        cli.run()
    except (KeyboardInterrupt, EOFError):
        cli.console.print("\n👋 Au revoir !")


if __name__ == "__main__":
    main()
