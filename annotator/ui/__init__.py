"""Browser front end (Streamlit) for the Document Date Annotator."""
