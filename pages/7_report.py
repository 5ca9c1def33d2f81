"""Step 7: Report Generation."""

import streamlit as st
import pandas as pd
import re
from io import BytesIO
from xml.sax.saxutils import escape

from mkappa.models import disagreements_to_dataframe, impact_to_dataframe, pairwise_to_dataframe
from mkappa.report import generate_basic_report, report_csv, summary_rows

st.set_page_config(page_title="Report - Mezzich's Kappa Calculator", layout="wide")

st.title("Step 7: Generate Report")

if not st.session_state.app_state.get('analysis_complete'):
    st.warning("Please run the analysis on the Analysis page first.")
    st.stop()

rater_data = st.session_state.app_state['rater_data']
result = st.session_state.app_state['result']
pairwise = st.session_state.app_state['pairwise_results']
rater_impact = st.session_state.app_state['rater_impact']
disagreements = st.session_state.app_state['disagreements']
input_names = [getattr(f, 'name', name) for name, f in st.session_state.app_state['rater_files'].items()]

st.markdown("""
Generate a reliability report for your methods section or supplementary materials.
""")

st.markdown("---")

st.subheader("Study Information")

col1, col2 = st.columns(2)

with col1:
    study_name = st.text_input("Study/Project Name", value="Inter-Rater Reliability Analysis")
    codebook_name = st.text_input("Codebook Name", value="Qualitative Codebook")
    st.number_input("Number of Raters", value=result.n_raters, disabled=True)
    st.number_input("Number of Segments", value=result.segment_count, disabled=True)

with col2:
    coding_procedure = st.text_area(
        "Coding Procedure Description",
        value="Raters independently applied one or more codes from the codebook to each segment.",
        height=100,
    )
    training_description = st.text_area(
        "Rater Training Description",
        value="Raters were trained on the codebook and completed practice coding before the main study.",
        height=100,
    )

st.markdown("---")

if st.button("Generate Report", type="primary", use_container_width=True):
    with st.spinner("Generating report..."):
        metadata = {
            "Study Name": study_name,
            "Codebook": codebook_name,
            "Number of Raters": str(result.n_raters),
            "Number of Segments": str(result.segment_count),
            "Number of Codes": str(len(rater_data.code_labels)) if rater_data.code_labels else "not labelled",
            "Coding Procedure": coding_procedure,
            "Training": training_description,
        }

        if st.session_state.app_state.get('llm_client'):
            from mkappa.llm_client import generate_report
            from mkappa.mezzich import results_summary

            try:
                report = generate_report(
                    st.session_state.app_state['llm_client'],
                    results_summary(result, pairwise, rater_impact),
                    metadata,
                )
            except Exception as e:
                st.warning(f"AI report failed ({e}); falling back to the standard report.")
                report = generate_basic_report(result, metadata)
        else:
            report = generate_basic_report(result, metadata)

        st.session_state.app_state['generated_report'] = report
        st.success("Report generated successfully!")

if st.session_state.app_state.get('generated_report'):
    st.markdown("---")
    st.subheader("Generated Report")

    report = st.session_state.app_state['generated_report']

    with st.expander("View Report", expanded=True):
        st.markdown(report)

    st.markdown("---")
    st.subheader("Export Report")

    col1, col2, col3, col4, col5 = st.columns(5)

    with col1:
        st.download_button(
            "Download Markdown",
            report,
            file_name="reliability_report.md",
            mime="text/markdown",
        )

    with col2:
        st.download_button(
            "Results CSV",
            report_csv(result, input_names),
            file_name="mkappa_results.csv",
            mime="text/csv",
        )

    with col3:
        try:
            xlsx_buffer = BytesIO()
            with pd.ExcelWriter(xlsx_buffer, engine='openpyxl') as writer:
                pd.DataFrame(summary_rows(result, input_names), columns=["Statistic", "Value"]).to_excel(
                    writer, sheet_name='Summary', index=False
                )
                result.segments_to_dataframe().to_excel(writer, sheet_name='Segments', index=False)
                pairwise_to_dataframe(pairwise).to_excel(writer, sheet_name='Pairwise', index=False)

                if rater_impact:
                    impact_to_dataframe(rater_impact).to_excel(writer, sheet_name='Rater Impact', index=False)

                if disagreements:
                    disagreements_to_dataframe(disagreements[:1000]).to_excel(
                        writer, sheet_name='Disagreements', index=False
                    )

            xlsx_buffer.seek(0)

            st.download_button(
                "All Results XLSX",
                xlsx_buffer,
                file_name="mkappa_results.xlsx",
                mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            )
        except Exception as e:
            st.button("All Results XLSX", disabled=True, help=f"Error: {e}")

    with col4:
        try:
            from docx import Document

            doc = Document()
            doc.add_heading('Inter-Rater Reliability Report', 0)

            for line in report.split('\n'):
                if line.startswith('# '):
                    doc.add_heading(line[2:], level=1)
                elif line.startswith('## '):
                    doc.add_heading(line[3:], level=2)
                elif line.startswith('### '):
                    doc.add_heading(line[4:], level=3)
                elif line.strip():
                    doc.add_paragraph(line)

            docx_buffer = BytesIO()
            doc.save(docx_buffer)
            docx_buffer.seek(0)

            st.download_button(
                "Download DOCX",
                docx_buffer,
                file_name="reliability_report.docx",
                mime="application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            )
        except ImportError:
            st.button("Download DOCX", disabled=True, help="Install python-docx for DOCX export")

    with col5:
        try:
            from reportlab.lib.pagesizes import A4
            from reportlab.lib.styles import getSampleStyleSheet
            from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer

            pdf_buffer = BytesIO()
            doc = SimpleDocTemplate(pdf_buffer, pagesize=A4, title="Mezzich's Kappa Report")
            styles = getSampleStyleSheet()
            headings = {'# ': 'Heading1', '## ': 'Heading2', '### ': 'Heading3'}

            story = []
            for line in report.split('\n'):
                if not line.strip() or set(line.strip()) <= set('-|'):
                    continue
                style = 'Normal'
                for prefix, name in headings.items():
                    if line.startswith(prefix):
                        line, style = line[len(prefix):], name
                        break
                text = re.sub(r'\*\*(.+?)\*\*', r'<b>\1</b>', escape(line))
                story.append(Paragraph(text, styles[style]))
                story.append(Spacer(1, 4))

            doc.build(story)
            pdf_buffer.seek(0)

            st.download_button(
                "Download PDF",
                pdf_buffer,
                file_name="reliability_report.pdf",
                mime="application/pdf",
            )
        except ImportError:
            st.button("Download PDF", disabled=True, help="Install reportlab for PDF export")

st.markdown("---")
st.info("Report generation complete! You can download your results in multiple formats above.")
