"""
Streamlit Frontend for Meu Saldo

The pages are thin: every action goes through FinanceApp and every number
shown comes from the derived views in meu_saldo.reports.

DESIGN PRINCIPLES:
1. Simple, clear interface in Portuguese
2. Invalid forms are simply not submitted
3. Warnings (storage, notifications) are shown once as toasts
4. The AI page never blocks the rest of the app
"""

import asyncio
from datetime import date
from decimal import Decimal

import plotly.graph_objects as go
import streamlit as st

from meu_saldo.config import validate_all_settings
from meu_saldo.models import (
    ContributionForm,
    DurationUnit,
    ExpenseForm,
    GoalForm,
    IncomeForm,
    Recurrence,
)
from meu_saldo.orchestrator import FinanceApp, create_app_components
from meu_saldo.reports import dues_for_month, dues_on_day, is_overdue, unpaid_due_dates
from meu_saldo.services.notifications import CollectingNotifier
from meu_saldo.utils import add_months, format_currency, format_days_until, format_month_pt, today


# Page configuration
st.set_page_config(
    page_title="Meu Saldo",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

ALARM_OPTIONS = [
    (7, "7 dias antes"),
    (5, "5 dias antes"),
    (3, "3 dias antes"),
    (1, "1 dia antes"),
    (0, "No dia do vencimento"),
]

UNIT_LABELS = {
    DurationUnit.DAYS: "Dias",
    DurationUnit.WEEKS: "Semanas",
    DurationUnit.MONTHS: "Meses",
    DurationUnit.YEARS: "Anos",
}


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_notifier() -> CollectingNotifier:
    return CollectingNotifier()


@st.cache_resource
def get_app() -> FinanceApp:
    """Get or create application components (cached)."""
    return create_app_components(notifier=get_notifier())


def show_feedback(app: FinanceApp):
    """Toasts for warnings, fired reminders and the last mutation result."""
    for warning in app.drain_warnings():
        st.toast(warning, icon="⚠️")
    for payload in get_notifier().drain():
        st.toast(f"**{payload.title}**\n\n{payload.body}", icon="🔔")
    message = st.session_state.pop("flash", None)
    if message:
        st.toast(message, icon="✅")


def flash(result):
    """Remember a mutation message for the next rerun and rerun."""
    if result is not None and result.applied:
        st.session_state.flash = result.message
        st.rerun()


def month_selector(key: str) -> date:
    """Previous / next month buttons around the month label."""
    if key not in st.session_state:
        st.session_state[key] = today().replace(day=1)

    col1, col2, col3 = st.columns([1, 3, 1])
    with col1:
        if st.button("◀", key=f"{key}_prev"):
            st.session_state[key] = add_months(st.session_state[key], -1)
            st.rerun()
    with col2:
        st.markdown(f"### {format_month_pt(st.session_state[key]).capitalize()}")
    with col3:
        if st.button("▶", key=f"{key}_next"):
            st.session_state[key] = add_months(st.session_state[key], 1)
            st.rerun()
    return st.session_state[key]


def main():
    """Main application entry point."""
    app = get_app()
    state = app.state

    st.sidebar.title("💰 Meu Saldo")
    st.sidebar.markdown(f"Olá, **{state.user.username}**!")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navegar para:",
        ["🏠 Início", "🧾 Contas", "🎯 Metas", "📊 Relatórios", "🤖 Contadora IA", "💾 Backup"],
        index=0,
    )

    show_feedback(app)

    if page == "🏠 Início":
        render_home_page(app)
    elif page == "🧾 Contas":
        render_accounts_page(app)
    elif page == "🎯 Metas":
        render_goals_page(app)
    elif page == "📊 Relatórios":
        render_reports_page(app)
    elif page == "🤖 Contadora IA":
        render_advisor_page(app)
    elif page == "💾 Backup":
        render_backup_page(app)


def render_home_page(app: FinanceApp):
    """Month summary, due-date alarms and the dues list."""
    st.title("🏠 Início")
    state = app.state
    current = today()

    alarms = app.alarms(current)
    if alarms:
        st.markdown("#### 🔔 Alarmes de vencimento")
        for alarm in alarms:
            st.warning(
                f"**{alarm.expense.name}** ({format_currency(alarm.expense.amount)}) "
                f"vence {format_days_until(alarm.days_until_due)}!"
            )

    month = month_selector("home_month")
    col1, col2 = st.columns(2)

    with col1:
        st.markdown("#### 📅 Vencimentos")
        due_dates = sorted(d for d in unpaid_due_dates(state.expense_list) if d.month == month.month and d.year == month.year)
        selected = st.selectbox(
            "Filtrar por dia",
            options=[None] + due_dates,
            format_func=lambda d: "Todo o mês" if d is None else d.strftime("%d/%m/%Y"),
        )
        if selected:
            dues = dues_on_day(state.expense_list, selected)
        else:
            dues = dues_for_month(state.expense_list, month)[:5]

        if not dues:
            st.info("Nenhuma conta para este dia." if selected else "Nenhum vencimento neste mês.")
        for expense in dues:
            c1, c2 = st.columns([3, 1])
            with c1:
                label = "🔴 Vencida" if is_overdue(expense, current) else expense.due_date.strftime("%d/%m")
                st.markdown(f"**{expense.name}** · {format_currency(expense.amount)} · {label}")
            with c2:
                if st.button("Pagar", key=f"pay_{expense.id}"):
                    flash(app.toggle_paid(expense.id))

    with col2:
        st.markdown("#### 💼 Resumo do mês")
        st.caption("Status atual das suas finanças")
        totals = app.month_summary(month)
        if totals.is_empty:
            st.info("Nenhum lançamento neste mês.")
        st.metric("Receitas", format_currency(totals.total_income))
        st.metric("Despesas", format_currency(totals.total_expenses))
        st.metric("Pagas", format_currency(totals.total_paid))
        st.metric("Saldo atual", format_currency(totals.current_balance))


def render_income_form(app: FinanceApp):
    editing = st.session_state.get("editing_income")
    entry = app.state.find_income(editing) if editing else None

    with st.form("income_form", clear_on_submit=True):
        st.markdown("#### ✏️ Editar ganho" if entry else "#### ➕ Novo ganho")
        name = st.text_input("Descrição", value=entry.name if entry else "")
        category = st.text_input("Categoria", value=entry.category if entry else "")
        amount = st.number_input(
            "Valor (R$)",
            min_value=0.0,
            step=10.0,
            value=float(entry.amount) if entry else 0.0,
        )
        entry_date = st.date_input("Data", value=entry.date if entry else today())
        submitted = st.form_submit_button("Salvar", type="primary")

    if submitted:
        form = IncomeForm(
            name=name,
            category=category,
            amount=Decimal(str(amount)),
            date=entry_date,
        )
        result = app.submit_income(form, income_id=entry.id if entry else None)
        if result is not None:
            st.session_state.pop("editing_income", None)
        flash(result)


def render_expense_form(app: FinanceApp):
    editing = st.session_state.get("editing_expense")
    entry = app.state.find_expense(editing) if editing else None

    with st.form("expense_form", clear_on_submit=True):
        st.markdown("#### ✏️ Editar despesa" if entry else "#### ➕ Nova despesa")
        name = st.text_input("Descrição", value=entry.name if entry else "")
        category = st.text_input("Categoria", value=entry.category if entry else "")
        amount = st.number_input(
            "Valor (R$)",
            min_value=0.0,
            step=10.0,
            value=float(entry.amount) if entry else 0.0,
        )
        due_date = st.date_input("Vencimento", value=entry.due_date if entry else today())
        paid = st.checkbox("Já está paga", value=entry.paid if entry else False)
        monthly = st.checkbox(
            "Repetir mensalmente (próximos 12 meses)",
            value=False,
            disabled=entry is not None,
        )
        st.markdown("Alarmes")
        offsets = [
            days
            for days, label in ALARM_OPTIONS
            if st.checkbox(
                label,
                key=f"alarm_{days}_{entry.id if entry else 'new'}",
                value=bool(entry and days in entry.alarm_offsets),
            )
        ]
        submitted = st.form_submit_button("Salvar", type="primary")

    if submitted:
        form = ExpenseForm(
            name=name,
            category=category,
            amount=Decimal(str(amount)),
            due_date=due_date,
            paid=paid,
            recurrence=Recurrence.MONTHLY if monthly else (entry.recurrence if entry else Recurrence.ONCE),
            alarm_offsets=offsets,
        )
        result = app.submit_expense(form, expense_id=entry.id if entry else None)
        if result is not None:
            st.session_state.pop("editing_expense", None)
        flash(result)


def render_accounts_page(app: FinanceApp):
    """Income and expense forms plus the month lists."""
    st.title("🧾 Contas")
    month = month_selector("accounts_month")
    state = app.state

    tab_income, tab_expense = st.tabs(["Ganhos", "Despesas"])

    with tab_income:
        render_income_form(app)
        entries = [e for e in state.income_list if e.date.year == month.year and e.date.month == month.month]
        if not entries:
            st.info("Nenhum ganho neste mês.")
        for entry in entries:
            c1, c2, c3 = st.columns([4, 1, 1])
            with c1:
                st.markdown(
                    f"**{entry.name}** · {entry.category} · "
                    f"{format_currency(entry.amount)} · {entry.date.strftime('%d/%m/%Y')}"
                )
            with c2:
                if st.button("Editar", key=f"edit_income_{entry.id}"):
                    st.session_state.editing_income = entry.id
                    st.rerun()
            with c3:
                if st.button("Excluir", key=f"delete_income_{entry.id}"):
                    flash(app.delete_income(entry.id))

    with tab_expense:
        render_expense_form(app)
        entries = [e for e in state.expense_list if e.due_date.year == month.year and e.due_date.month == month.month]
        if not entries:
            st.info("Nenhuma despesa neste mês.")
        for entry in entries:
            c1, c2, c3, c4 = st.columns([4, 1, 1, 1])
            with c1:
                status = "✅ Paga" if entry.paid else ("🔴 Vencida" if is_overdue(entry, today()) else "⏳ Pendente")
                st.markdown(
                    f"**{entry.name}** · {entry.category} · {format_currency(entry.amount)} · "
                    f"{entry.due_date.strftime('%d/%m/%Y')} · {status}"
                )
            with c2:
                if st.button("Desmarcar" if entry.paid else "Pagar", key=f"toggle_{entry.id}"):
                    flash(app.toggle_paid(entry.id))
            with c3:
                if st.button("Editar", key=f"edit_expense_{entry.id}"):
                    st.session_state.editing_expense = entry.id
                    st.rerun()
            with c4:
                if st.button("Excluir", key=f"delete_expense_{entry.id}"):
                    flash(app.delete_expense(entry.id))


def render_goals_page(app: FinanceApp):
    """Create goals, contribute and follow progress."""
    st.title("🎯 Metas")

    with st.form("goal_form", clear_on_submit=True):
        st.markdown("#### ➕ Nova meta")
        name = st.text_input("Nome da meta")
        target = st.number_input("Valor alvo (R$)", min_value=0.0, step=100.0)
        col1, col2 = st.columns(2)
        with col1:
            duration = st.number_input("Prazo", min_value=0.0, step=1.0)
        with col2:
            unit = st.selectbox(
                "Unidade",
                options=list(DurationUnit),
                index=2,
                format_func=lambda u: UNIT_LABELS[u],
            )
        submitted = st.form_submit_button("Criar meta", type="primary")

    if submitted:
        flash(app.submit_goal(GoalForm(
            name=name,
            target_value=Decimal(str(target)),
            duration=Decimal(str(duration)),
            unit=unit,
        )))

    goals = app.state.goal_list
    if not goals:
        st.info("Você ainda não tem metas. Crie a primeira acima!")

    for goal in goals:
        with st.container(border=True):
            st.markdown(f"### {goal.name}")
            st.progress(min(goal.progress_percent / 100, 1.0))
            st.markdown(
                f"{format_currency(goal.saved_amount)} de {format_currency(goal.target_value)} "
                f"({goal.progress_percent:.0f}%) · "
                f"Guardar {format_currency(goal.monthly_commitment)} por mês"
            )
            if goal.is_reached:
                st.success("Meta atingida! 🎉")
                continue

            col1, col2, col3 = st.columns([2, 1, 1])
            with col1:
                value = st.number_input(
                    "Adicionar valor",
                    min_value=0.0,
                    step=10.0,
                    key=f"contribution_{goal.id}",
                )
            with col2:
                if st.button("Adicionar", key=f"contribute_{goal.id}"):
                    result = app.contribute(ContributionForm(
                        goal_id=goal.id,
                        value=Decimal(str(value)),
                    ))
                    if result is not None and result.goal_reached:
                        st.balloons()
                    flash(result)
            with col3:
                if st.button("Excluir", key=f"delete_goal_{goal.id}"):
                    flash(app.delete_goal(goal.id))


def pie_chart(slices, title: str) -> go.Figure:
    fig = go.Figure(go.Pie(
        labels=[s.name for s in slices],
        values=[float(s.value) for s in slices],
        marker=dict(colors=[s.fill for s in slices]),
        hole=0.6,
        hovertemplate="%{label}: R$ %{value:,.2f}<extra></extra>",
    ))
    fig.update_layout(title=title, margin=dict(t=40, b=10, l=10, r=10))
    return fig


def render_reports_page(app: FinanceApp):
    """Category pies and the color editor."""
    st.title("📊 Relatórios")
    month = month_selector("reports_month")

    revenue, expense = app.month_report(month)
    if not revenue and not expense:
        st.info(f"Não há lançamentos para o mês de {format_month_pt(month).split(' ')[0]}.")
    else:
        col1, col2 = st.columns(2)
        with col1:
            if expense:
                st.plotly_chart(pie_chart(expense, "Despesas por categoria"), use_container_width=True)
        with col2:
            if revenue:
                st.plotly_chart(pie_chart(revenue, "Receitas por categoria"), use_container_width=True)

    with st.expander("🎨 Personalizar cores"):
        categories = app.color_editor_categories()
        if not categories:
            st.caption("Nenhuma categoria cadastrada ainda.")
        else:
            with st.form("color_form"):
                picked = [
                    (category.name, st.color_picker(category.name, value=category.color, key=f"color_{category.name}"))
                    for category in categories
                ]
                if st.form_submit_button("Salvar cores"):
                    flash(app.save_custom_colors(picked))


def render_advisor_page(app: FinanceApp):
    """Spending analysis from the insight service."""
    st.title("🤖 Contadora IA")

    request = app.spending_request()
    if request is None:
        st.info(
            "Faltam dados. Adicione seus ganhos e despesas na aba 'Contas' para que "
            "nossa IA possa gerar orientações para você."
        )
        return

    # Last write wins: one slot per request, replaced by each new answer
    results = st.session_state.setdefault("insight_results", {})
    key = request.cache_key()
    if key not in results:
        with st.spinner("Analisando suas finanças..."):
            results[key] = run_async(app.analyze_spending(request))
    result = results[key]

    if not result.success:
        st.error(f"**Erro ao gerar análise**\n\n{result.error}")
        if st.button("Tentar novamente"):
            results.pop(key, None)
            st.rerun()
        return

    analysis = result.analysis
    col1, col2 = st.columns(2)
    col1.metric("Limite diário sugerido", format_currency(analysis.daily_spending_limit))
    col2.metric("Limite semanal sugerido", format_currency(analysis.weekly_spending_limit))

    st.markdown("#### 💡 Conselhos")
    for sentence in analysis.advice_sentences:
        st.markdown(f"- {sentence}")

    st.markdown("#### 🎯 Compromisso com metas")
    st.info(
        f"Você está comprometido a economizar {format_currency(request.savings_goal)} "
        f"mensalmente para suas metas."
    )

    if st.button("✨ Gerar insights detalhados"):
        with st.spinner("Gerando insights..."):
            insights = run_async(app.generate_insights())
        if insights.success:
            for insight in insights.insights.insights:
                st.markdown(f"- {insight}")
        else:
            st.error(insights.error)


def render_backup_page(app: FinanceApp):
    """Storage status, export, username and reset."""
    st.title("💾 Backup")

    st.warning(
        "**Atenção!** Seus dados ficam salvos apenas neste computador. "
        "Se a pasta de dados for apagada, eles serão perdidos."
    )

    filename, content = app.export()
    st.download_button(
        "⬇️ Baixar backup (JSON)",
        data=content,
        file_name=filename,
        mime="application/json",
    )

    st.markdown("---")
    st.markdown("### 👤 Nome de usuário")
    with st.form("username_form"):
        username = st.text_input("Nome", value=app.state.user.username)
        if st.form_submit_button("Salvar nome"):
            flash(app.update_username(username))

    st.markdown("---")
    st.markdown("### ⚙️ Configuração")
    status = validate_all_settings()
    for name, key in [("Armazenamento", "storage"), ("Gemini (IA)", "gemini"), ("Aplicação", "app")]:
        if status.get(key, False):
            st.success(f"✅ {name}")
        else:
            st.error(f"❌ {name} - {status.get(f'{key}_error', 'Não configurado')}")

    st.markdown("---")
    st.markdown("### 🗑️ Apagar tudo")
    confirm = st.checkbox("Entendo que todos os dados serão apagados")
    if st.button("Apagar todos os dados", type="primary", disabled=not confirm):
        st.session_state.pop("insight_results", None)
        flash(app.reset())


if __name__ == "__main__":
    main()
